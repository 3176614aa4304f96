"""
Invoice Totals Signals

Keeps total_items_value, total_expenses_value and net_value in sync with
the invoice's items and expenses.
"""

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.db.models import Sum
from decimal import Decimal
import logging

from .models import Invoice, InvoiceItem, InvoiceExpense

logger = logging.getLogger(__name__)


def update_invoice_totals(invoice_id):
    """
    Recalculate the invoice totals from its items and expenses.

    Uses a queryset update so it is harmless while the invoice itself is
    being deleted.
    """
    items_total = InvoiceItem.objects.filter(
        invoice_id=invoice_id
    ).aggregate(total=Sum('value'))['total'] or Decimal('0.00')

    expenses_total = InvoiceExpense.objects.filter(
        invoice_id=invoice_id
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0.00')

    Invoice.objects.filter(pk=invoice_id).update(
        total_items_value=items_total,
        total_expenses_value=expenses_total,
        net_value=items_total + expenses_total,
    )

    logger.debug(f"Updated invoice {invoice_id} totals: items {items_total}, expenses {expenses_total}")


@receiver(post_save, sender=InvoiceItem)
@receiver(post_delete, sender=InvoiceItem)
def invoice_item_changed(sender, instance, **kwargs):
    update_invoice_totals(instance.invoice_id)


@receiver(post_save, sender=InvoiceExpense)
@receiver(post_delete, sender=InvoiceExpense)
def invoice_expense_changed(sender, instance, **kwargs):
    update_invoice_totals(instance.invoice_id)
