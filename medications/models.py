"""
Medicine consumption and medication alerts.

Models:
    - MedicineConsumptionInvoice: medicines given to a flock from a warehouse
    - MedicineConsumptionItem: one medicine line (consumes warehouse stock)
    - MedicineConsumptionExpense: extra costs on the invoice
    - MedicineConsumptionAttachment: supporting documents
    - MedicationAlert: scheduled dose for a batch, derived from Medicine.day_of_age
"""

from django.conf import settings
from django.db import models
from decimal import Decimal
import uuid

from core.attachments import Attachment


class MedicineConsumptionInvoice(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=100, unique=True)
    invoice_date = models.DateField(db_index=True)
    invoice_time = models.TimeField(null=True, blank=True)

    warehouse = models.ForeignKey(
        'farms.Warehouse',
        on_delete=models.CASCADE,
        related_name='medicine_consumption_invoices'
    )
    poultry_status = models.ForeignKey(
        'farms.PoultryStatus',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='medicine_consumption_invoices'
    )

    total_value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Sum of item values plus expenses"
    )
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='medicine_consumption_invoices'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'medicine_consumption_invoices'
        ordering = ['-invoice_date', '-created_at']

    def __str__(self):
        return f"Medicine consumption #{self.invoice_number}"


class MedicineConsumptionItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    consumption_invoice = models.ForeignKey(
        MedicineConsumptionInvoice,
        on_delete=models.CASCADE,
        related_name='items'
    )
    medicine = models.ForeignKey(
        'catalog.Medicine',
        on_delete=models.PROTECT,
        related_name='consumption_items'
    )
    unit = models.ForeignKey(
        'catalog.MeasurementUnit',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='consumption_items'
    )
    administration_day = models.PositiveIntegerField(null=True, blank=True)
    administration_date = models.DateField(null=True, blank=True)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'medicine_consumption_items'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.medicine.name} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.value = (self.quantity or Decimal('0')) * (self.price or Decimal('0'))
        super().save(*args, **kwargs)


class MedicineConsumptionExpense(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    consumption_invoice = models.ForeignKey(
        MedicineConsumptionInvoice,
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    expense_type = models.ForeignKey(
        'catalog.ExpenseType',
        on_delete=models.PROTECT,
        related_name='medicine_consumption_expenses'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    account_name = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'medicine_consumption_expenses'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.expense_type.name}: {self.amount}"


def consumption_attachment_path(instance, filename):
    return f"medicine-consumption/{uuid.uuid4().hex}_{filename}"


class MedicineConsumptionAttachment(Attachment):
    consumption_invoice = models.ForeignKey(
        MedicineConsumptionInvoice,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    file = models.FileField(upload_to=consumption_attachment_path, max_length=500)

    class Meta(Attachment.Meta):
        db_table = 'medicine_consumption_attachments'


class MedicationAlert(models.Model):
    """
    A medicine due for a batch on a given day of age.

    scheduled_date = chick_birth_date + scheduled_day
    alert_date     = scheduled_date - 1 day
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    farm = models.ForeignKey(
        'farms.Farm',
        on_delete=models.CASCADE,
        related_name='medication_alerts'
    )
    poultry_status = models.ForeignKey(
        'farms.PoultryStatus',
        on_delete=models.CASCADE,
        related_name='medication_alerts'
    )
    medicine = models.ForeignKey(
        'catalog.Medicine',
        on_delete=models.CASCADE,
        related_name='alerts'
    )

    scheduled_day = models.PositiveIntegerField(help_text="Chick age in days when the dose is due")
    scheduled_date = models.DateField(db_index=True)
    alert_date = models.DateField(db_index=True)

    is_administered = models.BooleanField(default=False)
    administered_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'medication_alerts'
        ordering = ['scheduled_date']
        unique_together = [('poultry_status', 'medicine', 'scheduled_day')]
        indexes = [
            models.Index(fields=['farm', 'is_administered']),
        ]

    def __str__(self):
        return f"{self.medicine.name} day {self.scheduled_day} ({self.scheduled_date})"
