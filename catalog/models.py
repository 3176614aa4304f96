"""
Lookup tables shared by inventory, invoices and reports.
"""

from django.db import models
import uuid


class MaterialName(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    material_name = models.CharField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'materials_names'
        ordering = ['material_name']

    def __str__(self):
        return self.material_name


class MeasurementUnit(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    unit_name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'measurement_units'
        ordering = ['unit_name']

    def __str__(self):
        return self.unit_name


class EggWeight(models.Model):
    """Weight class printed on egg sale invoices (e.g. "1800-1900")."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    weight_range = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'egg_weights'
        ordering = ['weight_range']

    def __str__(self):
        return self.weight_range


class ExpenseType(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expense_types'
        ordering = ['name']

    def __str__(self):
        return self.name


class Client(models.Model):
    """A customer buying from, or a provider selling to, the farms."""

    class ClientType(models.TextChoices):
        CUSTOMER = 'customer', 'Customer'
        PROVIDER = 'provider', 'Provider'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    type = models.CharField(max_length=20, choices=ClientType.choices, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clients'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.get_type_display()})"


class Medicine(models.Model):
    """
    A medicine or vaccine.

    day_of_age lists the chick ages (in days) at which it is given, e.g.
    "7, 14, 21" or "1-3". It drives medication alert generation.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    day_of_age = models.CharField(
        max_length=255,
        help_text="Comma separated days or ranges, e.g. '7, 14, 21-23'"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'medicines'
        ordering = ['name']

    def __str__(self):
        return self.name
