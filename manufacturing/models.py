"""
Manufacturing (feed blending) invoices.

Input items consume raw materials from the warehouse; the blended output is
added to stock once, when the invoice's output is posted.
"""

from django.conf import settings
from django.db import models
from decimal import Decimal
import uuid

from core.attachments import Attachment


class ManufacturingInvoice(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=100, unique=True)
    warehouse = models.ForeignKey(
        'farms.Warehouse',
        on_delete=models.CASCADE,
        related_name='manufacturing_invoices'
    )
    blend_name = models.CharField(max_length=200, blank=True)

    # Output
    material_name = models.ForeignKey(
        'catalog.MaterialName',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='manufacturing_outputs',
        help_text="Material produced by the blend"
    )
    unit = models.ForeignKey(
        'catalog.MeasurementUnit',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='manufacturing_outputs'
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    output_posted = models.BooleanField(
        default=False,
        help_text="Whether the output quantity has been added to stock"
    )

    manufacturing_date = models.DateField(db_index=True)
    manufacturing_time = models.TimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='manufacturing_invoices'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'manufacturing_invoices'
        ordering = ['-manufacturing_date', '-created_at']

    def __str__(self):
        return f"Manufacturing #{self.invoice_number}"


class ManufacturingItem(models.Model):
    """Raw material consumed by a blend."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    manufacturing_invoice = models.ForeignKey(
        ManufacturingInvoice,
        on_delete=models.CASCADE,
        related_name='items'
    )
    material_name = models.ForeignKey(
        'catalog.MaterialName',
        on_delete=models.PROTECT,
        related_name='manufacturing_inputs'
    )
    unit = models.ForeignKey(
        'catalog.MeasurementUnit',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='manufacturing_inputs'
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    blend_count = models.PositiveIntegerField(default=1)
    weight = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'manufacturing_invoice_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.material_name} x {self.quantity}"


class ManufacturingExpense(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    manufacturing_invoice = models.ForeignKey(
        ManufacturingInvoice,
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    expense_type = models.ForeignKey(
        'catalog.ExpenseType',
        on_delete=models.PROTECT,
        related_name='manufacturing_expenses'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    account_name = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'manufacturing_expenses'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.expense_type.name}: {self.amount}"


def manufacturing_attachment_path(instance, filename):
    return f"manufacturing/{uuid.uuid4().hex}_{filename}"


class ManufacturingAttachment(Attachment):
    manufacturing_invoice = models.ForeignKey(
        ManufacturingInvoice,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    file = models.FileField(upload_to=manufacturing_attachment_path, max_length=500)

    class Meta(Attachment.Meta):
        db_table = 'manufacturing_attachments'
