"""
Buy and sell invoices.

Buy invoice items add stock to the invoice's warehouse; sell invoice items
take stock out of it. Totals are kept in sync by invoices.signals.
"""

from django.conf import settings
from django.db import models
from decimal import Decimal
import uuid

from core.attachments import Attachment


class Invoice(models.Model):

    class InvoiceType(models.TextChoices):
        BUY = 'buy', 'Buy'
        SELL = 'sell', 'Sell'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_type = models.CharField(max_length=10, choices=InvoiceType.choices, db_index=True)
    invoice_number = models.CharField(max_length=100, unique=True)
    invoice_date = models.DateField(db_index=True)
    invoice_time = models.TimeField(null=True, blank=True)

    warehouse = models.ForeignKey(
        'farms.Warehouse',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )
    client = models.ForeignKey(
        'catalog.Client',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )

    # Totals (maintained by signals)
    total_items_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_expenses_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    checked = models.BooleanField(default=False, help_text="Reviewed by an administrator")
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-invoice_date', '-created_at']
        indexes = [
            models.Index(fields=['invoice_type', '-invoice_date']),
            models.Index(fields=['warehouse', '-invoice_date']),
        ]

    def __str__(self):
        return f"{self.get_invoice_type_display()} #{self.invoice_number}"


class InvoiceItem(models.Model):
    """One line of an invoice. value = quantity * price."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    material_name = models.ForeignKey(
        'catalog.MaterialName',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='invoice_items'
    )
    medicine = models.ForeignKey(
        'catalog.Medicine',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='invoice_items'
    )
    unit = models.ForeignKey(
        'catalog.MeasurementUnit',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoice_items'
    )
    egg_weight = models.ForeignKey(
        'catalog.EggWeight',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoice_items'
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    weight = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoice_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.item_name} x {self.quantity}"

    @property
    def item_name(self):
        if self.material_name_id:
            return self.material_name.material_name
        if self.medicine_id:
            return self.medicine.name
        return ''

    def save(self, *args, **kwargs):
        self.value = Decimal(str(self.quantity)) * Decimal(str(self.price))
        super().save(*args, **kwargs)


class InvoiceExpense(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='expenses')
    expense_type = models.ForeignKey(
        'catalog.ExpenseType',
        on_delete=models.PROTECT,
        related_name='invoice_expenses'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    account_name = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoice_expenses'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.expense_type.name}: {self.amount}"


def invoice_attachment_path(instance, filename):
    return f"invoices/{instance.invoice.invoice_type}/{uuid.uuid4().hex}_{filename}"


class InvoiceAttachment(Attachment):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='attachments')
    file = models.FileField(upload_to=invoice_attachment_path, max_length=500)

    class Meta(Attachment.Meta):
        db_table = 'invoice_attachments'
