"""
Invoice Service

Applies invoice items to the warehouse ledger and reverses them again:
- buy items are PURCHASE movements (the stock row is created on demand)
- sell items are SALE movements (the stock row must exist and cover the sale)
- deleting an item or a whole invoice reverses every movement it made
"""

from django.db import transaction
import logging

from inventory.models import StockMovementType
from inventory.services import InventoryLedger
from .models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)


class InvoiceService:
    """Ledger-aware invoice item operations for one acting user."""

    def __init__(self, user=None):
        self.user = user
        self.ledger = InventoryLedger(user)

    @transaction.atomic
    def add_item(self, invoice, material_name=None, medicine=None, unit=None,
                 quantity=0, price=0, weight=None, egg_weight=None):
        """
        Create an invoice item and apply it to the warehouse stock.

        Raises:
            ValueError: on invalid input
            InventoryError: when a sale cannot be covered by the stock row
        """
        if material_name is None and medicine is None:
            raise ValueError("Either material name or medicine must be provided")
        if material_name is not None and medicine is not None:
            raise ValueError("Cannot provide both material name and medicine")

        item = InvoiceItem(
            invoice=invoice,
            material_name=material_name,
            medicine=medicine,
            unit=unit,
            egg_weight=egg_weight,
            quantity=quantity,
            weight=weight,
            price=price,
        )

        if invoice.warehouse_id:
            self._apply(invoice, item)

        item.save()
        return item

    def _apply(self, invoice, item):
        if invoice.invoice_type == Invoice.InvoiceType.BUY:
            stock = self.ledger.get_or_create_stock(
                invoice.warehouse, item.unit,
                material_name=item.material_name, medicine=item.medicine
            )
            self.ledger.add_stock(
                stock, item.quantity, StockMovementType.PURCHASE,
                source=item, notes=f"Invoice {invoice.invoice_number}"
            )
        else:
            stock = self.ledger.require_stock(
                invoice.warehouse,
                material_name=item.material_name, medicine=item.medicine
            )
            self.ledger.remove_stock(
                stock, item.quantity, StockMovementType.SALE,
                source=item, notes=f"Invoice {invoice.invoice_number}"
            )

    def _reverse(self, invoice, item):
        if not invoice.warehouse_id:
            return

        stock = self.ledger.get_stock(
            invoice.warehouse,
            material_name=item.material_name, medicine=item.medicine, lock=True
        )
        if stock is None:
            logger.warning(
                f"Stock row for {item.item_name} no longer exists; "
                f"nothing to reverse for invoice {invoice.invoice_number}"
            )
            return

        notes = f"Reversal of invoice {invoice.invoice_number}"
        if invoice.invoice_type == Invoice.InvoiceType.BUY:
            self.ledger.remove_stock(
                stock, item.quantity, StockMovementType.PURCHASE_REVERSAL,
                source=item, notes=notes
            )
        else:
            self.ledger.add_stock(
                stock, item.quantity, StockMovementType.SALE_REVERSAL,
                source=item, notes=notes
            )

    @transaction.atomic
    def update_invoice(self, invoice, **changes):
        """
        Apply header changes to ``invoice``.

        Type and warehouse decide how items are reversed, so they are frozen
        once the invoice has items.
        """
        invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
        moved = [
            field for field in ('invoice_type', 'warehouse')
            if field in changes and changes[field] != getattr(invoice, field)
        ]
        if moved and invoice.items.exists():
            raise ValueError(
                f"Cannot change {' or '.join(moved)} of an invoice that already has items"
            )

        for field, value in changes.items():
            setattr(invoice, field, value)
        invoice.save()
        logger.info(f"Invoice {invoice.invoice_number} updated by {getattr(self.user, 'username', None)}")
        return invoice

    @transaction.atomic
    def update_item(self, item, **changes):
        """
        Update quantity, weight, price, unit or egg weight.

        Only the item's value is recomputed; stock is left untouched.
        """
        for field in ('quantity', 'weight', 'price', 'unit', 'egg_weight'):
            if field in changes:
                setattr(item, field, changes[field])
        item.save()
        return item

    @transaction.atomic
    def delete_item(self, item):
        invoice = item.invoice
        self._reverse(invoice, item)
        item.delete()
        logger.info(f"Item {item.item_name} removed from invoice {invoice.invoice_number}")

    @transaction.atomic
    def delete_invoice(self, invoice):
        """Reverse every item's stock effect, then delete the invoice."""
        for item in invoice.items.select_related('material_name', 'medicine'):
            self._reverse(invoice, item)

        number = invoice.invoice_number
        invoice.delete()
        logger.info(f"Invoice {number} deleted and its stock movements reversed")
