"""
Medicine Consumption Service

Each consumption item CONSUMES its medicine from the invoice's warehouse;
deleting an item or the whole invoice gives the medicine back with a
CONSUMPTION_REVERSAL.
"""

from django.db import transaction
import logging

from farms.scoping import check_warehouse_access
from inventory.models import StockMovementType
from inventory.services import InventoryLedger
from .models import MedicineConsumptionInvoice, MedicineConsumptionItem

logger = logging.getLogger(__name__)


class MedicineConsumptionService:

    def __init__(self, user=None):
        self.user = user
        self.ledger = InventoryLedger(user)

    def create_invoice(self, **data):
        """
        Raises:
            PermissionDenied: when a farmer targets another farm's warehouse
        """
        check_warehouse_access(self.user, data['warehouse'])
        invoice = MedicineConsumptionInvoice.objects.create(created_by=self.user, **data)
        logger.info(f"Medicine consumption invoice {invoice.invoice_number} created by {self.user.username}")
        return invoice

    @transaction.atomic
    def add_item(self, invoice, medicine, quantity, price=0, unit=None,
                 administration_day=None, administration_date=None):
        """
        Consume ``quantity`` of ``medicine`` and record the line.

        Raises:
            StockNotFoundError: "Medicine not found in warehouse inventory"
            InsufficientStockError: "Insufficient medicine stock. ..."
        """
        stock = self.ledger.require_stock(invoice.warehouse, medicine=medicine)
        item = MedicineConsumptionItem(
            consumption_invoice=invoice,
            medicine=medicine,
            unit=unit or stock.unit,
            administration_day=administration_day,
            administration_date=administration_date,
            quantity=quantity,
            price=price or 0,
        )
        self.ledger.remove_stock(
            stock, quantity, StockMovementType.CONSUMPTION,
            source=item, notes=f"Medicine consumption {invoice.invoice_number}"
        )
        item.save()
        return item

    def _reverse_item(self, invoice, item):
        stock = self.ledger.get_stock(invoice.warehouse, medicine=item.medicine, lock=True)
        if stock is None:
            logger.warning(
                f"Stock row for {item.medicine.name} no longer exists; "
                f"nothing to reverse for consumption {invoice.invoice_number}"
            )
            return
        self.ledger.add_stock(
            stock, item.quantity, StockMovementType.CONSUMPTION_REVERSAL,
            source=item, notes=f"Reversal of medicine consumption {invoice.invoice_number}"
        )

    @transaction.atomic
    def update_invoice(self, invoice, **changes):
        """
        Raises:
            ValueError: when the warehouse changes after medicine was consumed
        """
        invoice = MedicineConsumptionInvoice.objects.select_for_update().get(pk=invoice.pk)
        warehouse = changes.get('warehouse')
        if warehouse is not None and warehouse != invoice.warehouse and invoice.items.exists():
            raise ValueError("Cannot change warehouse of a consumption invoice that already has items")

        for field, value in changes.items():
            setattr(invoice, field, value)
        invoice.save()
        return invoice

    @transaction.atomic
    def delete_item(self, item):
        invoice = item.consumption_invoice
        self._reverse_item(invoice, item)
        item.delete()

    @transaction.atomic
    def delete_invoice(self, invoice):
        for item in invoice.items.select_related('medicine'):
            self._reverse_item(invoice, item)

        number = invoice.invoice_number
        invoice.delete()
        logger.info(f"Medicine consumption invoice {number} deleted and its stock movements reversed")
