"""
Medicine consumption totals signals.

total_value = sum of item values + sum of expense amounts, recomputed after
every item or expense change.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.db.models import Sum
from decimal import Decimal

from .models import MedicineConsumptionInvoice, MedicineConsumptionItem, MedicineConsumptionExpense


def update_consumption_total(invoice_id):
    items_total = MedicineConsumptionItem.objects.filter(
        consumption_invoice_id=invoice_id
    ).aggregate(total=Sum('value'))['total'] or Decimal('0.00')

    expenses_total = MedicineConsumptionExpense.objects.filter(
        consumption_invoice_id=invoice_id
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

    MedicineConsumptionInvoice.objects.filter(pk=invoice_id).update(
        total_value=items_total + expenses_total
    )


@receiver(post_save, sender=MedicineConsumptionItem)
@receiver(post_delete, sender=MedicineConsumptionItem)
def consumption_item_changed(sender, instance, **kwargs):
    update_consumption_total(instance.consumption_invoice_id)


@receiver(post_save, sender=MedicineConsumptionExpense)
@receiver(post_delete, sender=MedicineConsumptionExpense)
def consumption_expense_changed(sender, instance, **kwargs):
    update_consumption_total(instance.consumption_invoice_id)
