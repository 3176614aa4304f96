"""
Manufacturing Service

Feed blending against the warehouse ledger:
- input items CONSUME raw materials (the stock must cover them)
- posting the output adds the blended material as MANUFACTURING, once
- deleting an invoice reverses the posted output and every consumed input
- rolling back deletes an invoice that never touched stock
"""

from django.core.exceptions import PermissionDenied
from django.db import transaction
import logging

from farms.scoping import get_user_farm
from inventory.models import StockMovementType
from inventory.services import InventoryLedger
from .models import ManufacturingInvoice, ManufacturingItem

logger = logging.getLogger(__name__)


class ManufacturingService:

    def __init__(self, user=None):
        self.user = user
        self.ledger = InventoryLedger(user)

    def check_warehouse(self, warehouse):
        """Farmers may only manufacture in their own farm's warehouse."""
        if self.user.role == 'ADMIN':
            return
        if self.user.role != 'FARMER':
            raise PermissionDenied('Unauthorized - Access denied')

        farm = get_user_farm(self.user)
        if farm is None:
            raise PermissionDenied('No farm assigned to your account')
        if warehouse.farm_id != farm.id:
            raise PermissionDenied('Invalid warehouse - not assigned to your farm')

    def create_invoice(self, **data):
        self.check_warehouse(data['warehouse'])
        invoice = ManufacturingInvoice.objects.create(created_by=self.user, **data)
        logger.info(f"Manufacturing invoice {invoice.invoice_number} created by {self.user.username}")
        return invoice

    # -------------------------------------------------------------------------
    # Input items
    # -------------------------------------------------------------------------

    @transaction.atomic
    def add_item(self, invoice, material_name, quantity, unit=None, blend_count=1, weight=None):
        """
        Consume an input material and record it on the invoice.

        Raises:
            StockNotFoundError / InsufficientStockError
        """
        stock = self.ledger.require_stock(invoice.warehouse, material_name=material_name)
        item = ManufacturingItem(
            manufacturing_invoice=invoice,
            material_name=material_name,
            unit=unit,
            quantity=quantity,
            blend_count=blend_count or 1,
            weight=weight,
        )
        self.ledger.remove_stock(
            stock, quantity, StockMovementType.CONSUMPTION,
            source=item, notes=f"Manufacturing {invoice.invoice_number}"
        )
        item.save()
        return item

    def _reverse_item(self, invoice, item):
        stock = self.ledger.get_stock(invoice.warehouse, material_name=item.material_name, lock=True)
        if stock is None:
            logger.warning(
                f"Stock row for {item.material_name} no longer exists; "
                f"nothing to reverse for manufacturing {invoice.invoice_number}"
            )
            return
        self.ledger.add_stock(
            stock, item.quantity, StockMovementType.CONSUMPTION_REVERSAL,
            source=item, notes=f"Reversal of manufacturing {invoice.invoice_number}"
        )

    @transaction.atomic
    def delete_item(self, item):
        invoice = item.manufacturing_invoice
        self._reverse_item(invoice, item)
        item.delete()

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    @transaction.atomic
    def post_output(self, invoice):
        """
        Add the blended output to stock, creating the stock row if needed.

        Raises:
            ValueError: when output is missing or already posted
        """
        invoice = ManufacturingInvoice.objects.select_for_update().select_related(
            'warehouse', 'material_name', 'unit'
        ).get(pk=invoice.pk)

        if invoice.output_posted:
            raise ValueError("Output already added to inventory")
        if not invoice.material_name_id or not invoice.quantity or invoice.quantity <= 0:
            raise ValueError("Output material and quantity are required")

        stock = self.ledger.get_or_create_stock(
            invoice.warehouse, invoice.unit, material_name=invoice.material_name
        )
        self.ledger.add_stock(
            stock, invoice.quantity, StockMovementType.MANUFACTURING,
            source=invoice, notes=f"Output of manufacturing {invoice.invoice_number}"
        )

        invoice.output_posted = True
        invoice.save(update_fields=['output_posted', 'updated_at'])
        logger.info(f"Manufacturing {invoice.invoice_number} output of {invoice.quantity} posted")
        return invoice

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    @transaction.atomic
    def delete_invoice(self, invoice):
        """Reverse posted output, then every input's consumption, then delete."""
        invoice = ManufacturingInvoice.objects.select_for_update().select_related(
            'warehouse', 'material_name'
        ).get(pk=invoice.pk)

        if invoice.output_posted and invoice.material_name_id:
            stock = self.ledger.get_stock(invoice.warehouse, material_name=invoice.material_name, lock=True)
            if stock is not None:
                self.ledger.remove_stock(
                    stock, invoice.quantity, StockMovementType.MANUFACTURING_REVERSAL,
                    source=invoice, notes=f"Reversal of manufacturing {invoice.invoice_number}"
                )
            else:
                logger.warning(f"Output stock row of manufacturing {invoice.invoice_number} no longer exists")

        for item in invoice.items.select_related('material_name'):
            self._reverse_item(invoice, item)

        number = invoice.invoice_number
        invoice.delete()
        logger.info(f"Manufacturing invoice {number} deleted and its stock movements reversed")

    @transaction.atomic
    def rollback_invoice(self, invoice):
        """
        Delete an invoice whose creation failed before anything was posted.

        Raises:
            ValueError: if the invoice already moved stock
        """
        invoice = ManufacturingInvoice.objects.select_for_update().get(pk=invoice.pk)
        if invoice.output_posted or invoice.items.exists():
            raise ValueError("Cannot roll back a manufacturing invoice that has already moved stock")
        number = invoice.invoice_number
        invoice.delete()
        logger.info(f"Manufacturing invoice {number} rolled back")
