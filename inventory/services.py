"""
Inventory ledger.

Every stock change in the system (invoice items, manufacturing inputs and
outputs, medicine consumption, daily egg production) goes through
InventoryLedger. Each call locks the stock row, adjusts one movement column
plus current_balance, and writes a StockMovement audit record.

ATOMICITY: every public method runs inside transaction.atomic() and locks
the row with select_for_update(). Callers composing several ledger calls
wrap them in their own transaction so a failure rolls back all of them.
"""

from django.db import transaction
from decimal import Decimal, InvalidOperation
import logging

from .models import Material, StockMovement, StockMovementType

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class InventoryError(Exception):
    """Base class for ledger failures."""
    pass


class InsufficientStockError(InventoryError):
    """Raised when a removal asks for more than the row holds."""

    def __init__(self, available, required, item_kind=''):
        self.available = available
        self.required = required
        kind = f"{item_kind} " if item_kind else ''
        super().__init__(
            f"Insufficient {kind}stock. Available: {available}, Required: {required}"
        )


class StockNotFoundError(InventoryError):
    """Raised when the warehouse has no stock row for the requested item."""
    pass


# Column touched by each movement type and the direction it moves in.
ADDITION_COLUMNS = {
    StockMovementType.PURCHASE: ('purchases', 1),
    StockMovementType.PRODUCTION: ('purchases', 1),
    StockMovementType.MANUFACTURING: ('manufacturing', 1),
    StockMovementType.SALE_REVERSAL: ('sales', -1),
    StockMovementType.CONSUMPTION_REVERSAL: ('consumption', -1),
}

REMOVAL_COLUMNS = {
    StockMovementType.SALE: ('sales', 1),
    StockMovementType.CONSUMPTION: ('consumption', 1),
    StockMovementType.PURCHASE_REVERSAL: ('purchases', -1),
    StockMovementType.MANUFACTURING_REVERSAL: ('manufacturing', -1),
}


def to_quantity(value) -> Decimal:
    """Coerce ``value`` to a strictly positive Decimal."""
    try:
        quantity = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError("Quantity must be a number")
    if quantity <= 0:
        raise ValueError("Quantity must be positive")
    return quantity


class InventoryLedger:
    """
    Stock row access and balance changes for one acting user.
    """

    def __init__(self, user=None):
        self.user = user

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_stock(self, warehouse, material_name=None, medicine=None, lock=False):
        """Return the stock row for the item in ``warehouse``, or None."""
        if (material_name is None) == (medicine is None):
            raise ValueError("Either material name or medicine must be provided")

        queryset = Material.objects.all()
        if lock:
            queryset = queryset.select_for_update()

        if material_name is not None:
            return queryset.filter(warehouse=warehouse, material_name=material_name).first()
        return queryset.filter(warehouse=warehouse, medicine=medicine).first()

    def require_stock(self, warehouse, material_name=None, medicine=None):
        """Like get_stock(lock=True) but raises StockNotFoundError when missing."""
        stock = self.get_stock(warehouse, material_name=material_name, medicine=medicine, lock=True)
        if stock is None:
            if medicine is not None:
                raise StockNotFoundError("Medicine not found in warehouse inventory")
            raise StockNotFoundError("Material not found in warehouse inventory")
        return stock

    @transaction.atomic
    def get_or_create_stock(self, warehouse, unit, material_name=None, medicine=None):
        """Return the stock row, creating it with zero balances when missing."""
        stock = self.get_stock(warehouse, material_name=material_name, medicine=medicine, lock=True)
        if stock is not None:
            return stock

        stock = Material.objects.create(
            warehouse=warehouse,
            material_name=material_name,
            medicine=medicine,
            unit=unit,
        )
        logger.info(f"Created stock row for {stock.item_name} in warehouse {warehouse.name}")
        return stock

    # -------------------------------------------------------------------------
    # Balance changes
    # -------------------------------------------------------------------------

    @transaction.atomic
    def add_stock(self, stock, quantity, movement_type, source=None, notes=''):
        """
        Add ``quantity`` to the row and record the movement.

        Returns the refreshed, locked stock row.
        """
        quantity = to_quantity(quantity)
        if movement_type not in ADDITION_COLUMNS:
            raise ValueError(f"{movement_type} is not an addition movement")

        stock = Material.objects.select_for_update().get(pk=stock.pk)
        column, direction = ADDITION_COLUMNS[movement_type]
        self._shift_column(stock, column, direction, quantity, movement_type)

        stock.current_balance += quantity
        stock.save()

        self._record(stock, movement_type, quantity, source, notes)
        return stock

    @transaction.atomic
    def remove_stock(self, stock, quantity, movement_type, source=None, notes=''):
        """
        Remove ``quantity`` from the row and record the movement.

        Raises:
            InsufficientStockError: if quantity exceeds current_balance
        """
        quantity = to_quantity(quantity)
        if movement_type not in REMOVAL_COLUMNS:
            raise ValueError(f"{movement_type} is not a removal movement")

        stock = Material.objects.select_for_update().get(pk=stock.pk)
        if quantity > stock.current_balance:
            raise InsufficientStockError(
                stock.current_balance,
                quantity,
                item_kind='medicine' if stock.is_medicine else ''
            )

        column, direction = REMOVAL_COLUMNS[movement_type]
        self._shift_column(stock, column, direction, quantity, movement_type)

        stock.current_balance -= quantity
        stock.save()

        self._record(stock, movement_type, -quantity, source, notes)
        return stock

    def _shift_column(self, stock, column, direction, quantity, movement_type):
        current = getattr(stock, column)
        if direction > 0:
            setattr(stock, column, current + quantity)
            return

        # Reversals never drive a movement column below zero
        if quantity > current:
            logger.warning(
                f"{movement_type} of {quantity} exceeds {column} ({current}) "
                f"on stock row {stock.pk}; clamping at 0"
            )
            setattr(stock, column, Decimal('0.00'))
        else:
            setattr(stock, column, current - quantity)

    def _record(self, stock, movement_type, signed_quantity, source, notes):
        movement = StockMovement.objects.create(
            material=stock,
            movement_type=movement_type,
            quantity=signed_quantity,
            balance_after=stock.current_balance,
            source_type=source.__class__.__name__ if source is not None else None,
            source_id=str(source.pk) if source is not None else None,
            notes=notes,
            recorded_by=self.user if self.user is not None and self.user.is_authenticated else None,
        )
        logger.info(
            f"Stock {movement_type} {signed_quantity} on {stock.item_name} "
            f"(warehouse {stock.warehouse_id}), balance {stock.current_balance}"
        )
        return movement


# =============================================================================
# STOCK ROW MAINTENANCE
# =============================================================================

class MaterialService:
    """
    Admin maintenance of stock rows: opening stock creation and edits.
    """

    def __init__(self, user=None):
        self.user = user

    def create_material(self, warehouse, unit, opening_balance=0, material_name=None, medicine=None):
        """
        Create a stock row with an opening balance.

        Raises:
            ValueError: on invalid input or duplicate item in the warehouse
        """
        try:
            opening_balance = Decimal(str(opening_balance if opening_balance is not None else 0))
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError("Opening balance must be a number")
        if opening_balance < 0:
            raise ValueError("Opening balance cannot be negative")

        if material_name is None and medicine is None:
            raise ValueError("Either material name or medicine must be provided")
        if material_name is not None and medicine is not None:
            raise ValueError("Cannot provide both material name and medicine")

        ledger = InventoryLedger(self.user)
        if ledger.get_stock(warehouse, material_name=material_name, medicine=medicine) is not None:
            raise ValueError("This item already exists in the selected warehouse")

        material = Material.objects.create(
            warehouse=warehouse,
            material_name=material_name,
            medicine=medicine,
            unit=unit,
            opening_balance=opening_balance,
            current_balance=opening_balance,
        )
        logger.info(
            f"Opening stock {material.item_name} = {opening_balance} "
            f"created in warehouse {warehouse.name}"
        )
        return material

    @transaction.atomic
    def update_material(self, material, **changes):
        """Update unit and/or opening balance, then recompute current_balance."""
        material = Material.objects.select_for_update().get(pk=material.pk)

        if 'unit' in changes:
            material.unit = changes['unit']

        if 'opening_balance' in changes:
            try:
                opening_balance = Decimal(str(changes['opening_balance']))
            except (InvalidOperation, TypeError, ValueError):
                raise ValueError("Opening balance must be a number")
            if opening_balance < 0:
                raise ValueError("Opening balance cannot be negative")
            material.opening_balance = opening_balance

        if material.recalculate_balance() < 0:
            raise ValueError("Opening balance would make the current balance negative")
        material.save()
        return material
