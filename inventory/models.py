"""
Warehouse stock rows and their movement audit trail.

Every stock row (Material) belongs to one warehouse and tracks exactly one
item: a catalog material name OR a medicine. Balances are only changed
through inventory.services.InventoryLedger, which writes a StockMovement
for each change.
"""

from django.db import models
from decimal import Decimal
import uuid


class StockMovementType(models.TextChoices):
    """Types of stock movements"""
    # Additions
    PURCHASE = 'purchase', 'Purchase'
    PRODUCTION = 'production', 'Production'
    MANUFACTURING = 'manufacturing', 'Manufacturing Output'
    SALE_REVERSAL = 'sale_reversal', 'Sale Reversal'
    CONSUMPTION_REVERSAL = 'consumption_reversal', 'Consumption Reversal'

    # Deductions
    SALE = 'sale', 'Sale'
    CONSUMPTION = 'consumption', 'Consumption'
    PURCHASE_REVERSAL = 'purchase_reversal', 'Purchase Reversal'
    MANUFACTURING_REVERSAL = 'manufacturing_reversal', 'Manufacturing Reversal'


class Material(models.Model):
    """
    Per-warehouse balance of one material name or one medicine.

    current_balance = opening_balance + purchases + manufacturing
                      - sales - consumption
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    warehouse = models.ForeignKey(
        'farms.Warehouse',
        on_delete=models.CASCADE,
        related_name='materials'
    )
    material_name = models.ForeignKey(
        'catalog.MaterialName',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='stock_rows'
    )
    medicine = models.ForeignKey(
        'catalog.Medicine',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='stock_rows'
    )
    unit = models.ForeignKey(
        'catalog.MeasurementUnit',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_rows'
    )

    # Balances
    opening_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    purchases = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text='Purchased and produced quantity'
    )
    sales = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    consumption = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    manufacturing = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text='Quantity added by manufacturing output'
    )
    current_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        db_index=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'materials'
        ordering = ['-created_at']
        unique_together = [
            ['warehouse', 'material_name'],
            ['warehouse', 'medicine'],
        ]
        indexes = [
            models.Index(fields=['warehouse', 'current_balance']),
        ]

    def __str__(self):
        return f"{self.item_name} @ {self.warehouse.name}: {self.current_balance}"

    @property
    def item_name(self):
        if self.material_name_id:
            return self.material_name.material_name
        if self.medicine_id:
            return self.medicine.name
        return ''

    @property
    def is_medicine(self):
        return self.medicine_id is not None

    def recalculate_balance(self):
        """Recompute current_balance from the movement columns."""
        self.current_balance = (
            self.opening_balance
            + self.purchases
            + self.manufacturing
            - self.sales
            - self.consumption
        )
        return self.current_balance


class StockMovement(models.Model):
    """
    Tracks all stock movements (additions and deductions).
    Provides audit trail and history for inventory changes.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    material = models.ForeignKey(
        Material,
        on_delete=models.CASCADE,
        related_name='movements'
    )
    movement_type = models.CharField(
        max_length=30,
        choices=StockMovementType.choices,
        db_index=True
    )
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text='Positive for additions, negative for removals'
    )
    balance_after = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text='Stock balance after this movement'
    )

    # Source tracking (polymorphic reference)
    source_type = models.CharField(
        max_length=50,
        blank=True,
        null=True,
        help_text='Model name of source record (InvoiceItem, DailyReport, etc.)'
    )
    source_id = models.CharField(
        max_length=50,
        blank=True,
        null=True,
        help_text='UUID of source record'
    )

    notes = models.TextField(blank=True)
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_movements'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['material', '-created_at']),
            models.Index(fields=['movement_type', '-created_at']),
            models.Index(fields=['source_type', 'source_id']),
        ]

    def __str__(self):
        action = "Added" if self.quantity > 0 else "Removed"
        return f"{action} {abs(self.quantity)} - {self.get_movement_type_display()}"
