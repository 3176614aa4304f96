"""Query-string helpers shared by the API views."""

from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError
import uuid


def uuid_param(request, name, required=False):
    """
    Return query parameter ``name`` as a UUID, or None when absent.

    Raises DRF ValidationError (400) when it is malformed, or missing and
    ``required``.
    """
    value = request.query_params.get(name)
    if not value:
        if required:
            raise ValidationError({name: 'This parameter is required.'})
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError({name: 'Must be a valid UUID.'})


def date_param(request, name, required=False):
    """
    Return query parameter ``name`` as a date, or None when absent.

    Both non-ISO text and impossible dates such as 2024-02-30 are a 400.
    """
    value = request.query_params.get(name)
    if not value:
        if required:
            raise ValidationError({name: 'This parameter is required.'})
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({name: 'Must be a valid date (YYYY-MM-DD).'})
    return parsed
