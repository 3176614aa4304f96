"""
File attachments shared by invoices, manufacturing invoices, medicine
consumption invoices and daily reports.

Files are stored through Django's default storage under MEDIA_ROOT; the
row keeps the original file name and MIME type so downloads can be named
and previewed properly.
"""

from django.conf import settings
from django.db import models
from rest_framework import status
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
import logging
import os
import uuid

logger = logging.getLogger(__name__)

MIME_MAPPING = {
    '.pdf': 'application/pdf',
    '.doc': 'application/msword',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    '.xls': 'application/vnd.ms-excel',
    '.xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.webp': 'image/webp',
}


def validate_upload(file):
    """
    Validate an uploaded file and return its MIME type.

    Raises:
        ValueError: if the file is missing, too large or of a disallowed type
    """
    if not file:
        raise ValueError("File is required")

    max_size = settings.MAX_UPLOAD_SIZE
    if file.size > max_size:
        raise ValueError(
            f"File size exceeds maximum allowed size of {max_size // (1024 * 1024)}MB"
        )

    file_ext = os.path.splitext(file.name)[1].lower()
    if file_ext not in MIME_MAPPING:
        raise ValueError(f"File type not allowed. Allowed: {', '.join(MIME_MAPPING)}")

    return MIME_MAPPING[file_ext]


class Attachment(models.Model):
    """Abstract attachment row; subclasses add the owning foreign key."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    file = models.FileField(max_length=500)
    file_name = models.CharField(max_length=255)
    file_type = models.CharField(max_length=100)
    file_size = models.PositiveIntegerField(default=0, help_text="File size in bytes")
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return self.file_name

    def delete(self, *args, **kwargs):
        """Remove the stored file together with the row."""
        storage, name = self.file.storage, self.file.name
        result = super().delete(*args, **kwargs)
        if name:
            storage.delete(name)
        return result


def attachment_payload(attachment, request=None):
    url = attachment.file.url if attachment.file else None
    if url and request is not None:
        url = request.build_absolute_uri(url)
    return {
        'id': str(attachment.id),
        'file_name': attachment.file_name,
        'file_type': attachment.file_type,
        'file_size': attachment.file_size,
        'file_url': url,
        'created_at': attachment.created_at,
    }


class AttachmentViewMixin:
    """
    List/upload/delete behaviour for an owner's attachments.

    Subclasses set ``attachment_model`` and ``owner_field`` and pass an
    owner they have already checked access to.
    """
    attachment_model = None
    owner_field = None
    parser_classes = [MultiPartParser, FormParser]

    def list_attachments(self, request, owner):
        attachments = self.attachment_model.objects.filter(**{self.owner_field: owner})
        return Response([attachment_payload(a, request) for a in attachments])

    def upload_attachment(self, request, owner):
        file = request.FILES.get('file')
        try:
            mime_type = validate_upload(file)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        attachment = self.attachment_model.objects.create(
            **{self.owner_field: owner},
            file=file,
            file_name=file.name,
            file_type=mime_type,
            file_size=file.size,
            uploaded_by=request.user,
        )
        logger.info(f"Attachment {attachment.file_name} uploaded to {owner.__class__.__name__} {owner.pk}")
        return Response(attachment_payload(attachment, request), status=status.HTTP_201_CREATED)

    def delete_attachment(self, request, owner, attachment_id):
        attachment = self.attachment_model.objects.filter(
            **{self.owner_field: owner}, pk=attachment_id
        ).first()
        if attachment is None:
            return Response({'error': 'Attachment not found'}, status=status.HTTP_404_NOT_FOUND)

        attachment.delete()
        logger.info(f"Attachment {attachment_id} deleted from {owner.__class__.__name__} {owner.pk}")
        return Response({'message': 'Attachment deleted successfully'})
