"""
Inventory ledger and stock row API tests.

Covers:
- add/remove movements and the column each one touches
- strict removal and clamped reversals
- the StockMovement audit trail
- stock row creation, update and farm scoping through the API
- the inventory report endpoints
"""

import pytest
from decimal import Decimal

from inventory.models import Material, StockMovement, StockMovementType
from inventory.services import (
    InsufficientStockError,
    InventoryLedger,
    MaterialService,
    StockNotFoundError,
)

pytestmark = pytest.mark.django_db


# ==============================================================================
# LEDGER
# ==============================================================================

class TestInventoryLedger:
    """Balance changes made through InventoryLedger."""

    def test_purchase_adds_to_purchases_and_balance(self, warehouse, kg, corn, make_stock, admin_user):
        stock = make_stock(warehouse, kg, 10, material_name=corn)

        stock = InventoryLedger(admin_user).add_stock(stock, Decimal('5'), StockMovementType.PURCHASE)

        assert stock.purchases == Decimal('5')
        assert stock.current_balance == Decimal('15')

    def test_sale_moves_sales_column(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)

        stock = InventoryLedger().remove_stock(stock, 4, StockMovementType.SALE)

        assert stock.sales == Decimal('4')
        assert stock.current_balance == Decimal('6')

    def test_manufacturing_output_moves_manufacturing_column(self, warehouse, kg, feed_mix, make_stock):
        stock = make_stock(warehouse, kg, 0, material_name=feed_mix)

        stock = InventoryLedger().add_stock(stock, 20, StockMovementType.MANUFACTURING)

        assert stock.manufacturing == Decimal('20')
        assert stock.purchases == Decimal('0')
        assert stock.current_balance == Decimal('20')

    def test_removal_beyond_balance_is_rejected(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 3, material_name=corn)

        with pytest.raises(InsufficientStockError) as exc:
            InventoryLedger().remove_stock(stock, 5, StockMovementType.CONSUMPTION)

        assert 'Available: 3' in str(exc.value)
        stock.refresh_from_db()
        assert stock.current_balance == Decimal('3')
        assert stock.consumption == Decimal('0')

    def test_medicine_shortage_names_medicine(self, warehouse, kg, vaccine, make_stock):
        stock = make_stock(warehouse, kg, 1, medicine=vaccine)

        with pytest.raises(InsufficientStockError) as exc:
            InventoryLedger().remove_stock(stock, 2, StockMovementType.CONSUMPTION)

        assert str(exc.value).startswith('Insufficient medicine stock')

    def test_reversal_clamps_column_at_zero(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)

        stock = InventoryLedger().add_stock(stock, 4, StockMovementType.SALE_REVERSAL)

        assert stock.sales == Decimal('0')
        assert stock.current_balance == Decimal('14')

    def test_non_positive_quantity_is_rejected(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)

        with pytest.raises(ValueError, match='Quantity must be positive'):
            InventoryLedger().add_stock(stock, 0, StockMovementType.PURCHASE)

    def test_wrong_direction_movement_is_rejected(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)

        with pytest.raises(ValueError):
            InventoryLedger().add_stock(stock, 1, StockMovementType.SALE)

    def test_require_stock_raises_when_missing(self, warehouse, corn, vaccine):
        ledger = InventoryLedger()

        with pytest.raises(StockNotFoundError, match='Material not found'):
            ledger.require_stock(warehouse, material_name=corn)
        with pytest.raises(StockNotFoundError, match='Medicine not found'):
            ledger.require_stock(warehouse, medicine=vaccine)

    def test_get_or_create_stock_is_idempotent(self, warehouse, kg, corn):
        ledger = InventoryLedger()

        first = ledger.get_or_create_stock(warehouse, kg, material_name=corn)
        second = ledger.get_or_create_stock(warehouse, kg, material_name=corn)

        assert first.pk == second.pk
        assert Material.objects.filter(warehouse=warehouse).count() == 1


class TestStockMovementAuditTrail:
    """Every ledger call leaves a StockMovement behind."""

    def test_movement_records_signed_quantity_and_balance(self, warehouse, kg, corn, make_stock, admin_user):
        stock = make_stock(warehouse, kg, 10, material_name=corn)
        ledger = InventoryLedger(admin_user)

        ledger.add_stock(stock, 5, StockMovementType.PURCHASE, notes='Delivery')
        ledger.remove_stock(stock, 8, StockMovementType.SALE)

        added = StockMovement.objects.get(material=stock, movement_type=StockMovementType.PURCHASE)
        removed = StockMovement.objects.get(material=stock, movement_type=StockMovementType.SALE)
        assert added.quantity == Decimal('5')
        assert added.balance_after == Decimal('15')
        assert added.notes == 'Delivery'
        assert added.recorded_by == admin_user
        assert removed.quantity == Decimal('-8')
        assert removed.balance_after == Decimal('7')

    def test_movement_tracks_source(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)

        InventoryLedger().remove_stock(stock, 1, StockMovementType.CONSUMPTION, source=warehouse)

        movement = StockMovement.objects.get(material=stock)
        assert movement.source_type == 'Warehouse'
        assert movement.source_id == str(warehouse.pk)


class TestMaterialService:

    def test_duplicate_item_in_warehouse_is_rejected(self, warehouse, kg, corn):
        service = MaterialService()
        service.create_material(warehouse, kg, 5, material_name=corn)

        with pytest.raises(ValueError, match='already exists'):
            service.create_material(warehouse, kg, 5, material_name=corn)

    def test_both_item_kinds_is_rejected(self, warehouse, kg, corn, vaccine):
        with pytest.raises(ValueError, match='Cannot provide both'):
            MaterialService().create_material(warehouse, kg, 5, material_name=corn, medicine=vaccine)

    def test_opening_balance_update_recomputes_balance(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)
        InventoryLedger().remove_stock(stock, 4, StockMovementType.SALE)

        stock = MaterialService().update_material(stock, opening_balance=Decimal('20'))

        assert stock.current_balance == Decimal('16')

    def test_opening_balance_update_cannot_go_negative(self, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)
        InventoryLedger().remove_stock(stock, 8, StockMovementType.SALE)

        with pytest.raises(ValueError, match='negative'):
            MaterialService().update_material(stock, opening_balance=Decimal('5'))


# ==============================================================================
# API
# ==============================================================================

class TestMaterialEndpoints:

    def test_admin_creates_opening_stock(self, admin_client, warehouse, kg, corn):
        response = admin_client.post('/api/inventory/materials/', {
            'warehouse': str(warehouse.id),
            'material_name': str(corn.id),
            'unit': str(kg.id),
            'opening_balance': '25.00',
        })

        assert response.status_code == 201
        assert response.data['item_name'] == 'Corn'
        assert Decimal(response.data['current_balance']) == Decimal('25')

    def test_farmer_cannot_create_stock(self, farmer_client, warehouse, kg, corn):
        response = farmer_client.post('/api/inventory/materials/', {
            'warehouse': str(warehouse.id),
            'material_name': str(corn.id),
            'unit': str(kg.id),
        })

        assert response.status_code == 403

    def test_farmer_lists_only_own_stock(self, api_client, farmer_user, warehouse, other_warehouse,
                                         kg, corn, make_stock):
        make_stock(warehouse, kg, 5, material_name=corn)
        make_stock(other_warehouse, kg, 7, material_name=corn)
        api_client.force_authenticate(user=farmer_user)

        response = api_client.get('/api/inventory/materials/')

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['warehouse'] == warehouse.id

    def test_malformed_warehouse_filter_is_a_bad_request(self, admin_client):
        response = admin_client.get('/api/inventory/materials/?warehouse=not-a-uuid')

        assert response.status_code == 400

    def test_lookup_returns_zero_without_row(self, admin_client, warehouse, corn):
        response = admin_client.get(
            f'/api/inventory/materials/lookup/?warehouse={warehouse.id}&material_name={corn.id}'
        )

        assert response.status_code == 200
        assert Decimal(str(response.data['current_balance'])) == Decimal('0')

    def test_movements_endpoint_lists_audit_trail(self, admin_client, warehouse, kg, corn, make_stock):
        stock = make_stock(warehouse, kg, 10, material_name=corn)
        InventoryLedger().remove_stock(stock, 2, StockMovementType.SALE)

        response = admin_client.get(f'/api/inventory/materials/{stock.id}/movements/')

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['movement_type'] == 'sale'

    def test_warehouse_medicines_lists_positive_balances(self, api_client, farmer_user, warehouse,
                                                         kg, vaccine, make_stock):
        make_stock(warehouse, kg, 3, medicine=vaccine)
        api_client.force_authenticate(user=farmer_user)

        response = api_client.get(f'/api/inventory/warehouses/{warehouse.id}/medicines/')

        assert response.status_code == 200
        assert [row['medicine_name'] for row in response.data] == ['Newcastle vaccine']

    def test_available_medicine_quantity(self, admin_client, warehouse, kg, vaccine, make_stock):
        url = f'/api/inventory/warehouses/{warehouse.id}/medicines/{vaccine.id}/available/'
        assert Decimal(str(admin_client.get(url).data['available'])) == Decimal('0')

        make_stock(warehouse, kg, 4, medicine=vaccine)

        assert Decimal(str(admin_client.get(url).data['available'])) == Decimal('4')

    def test_warehouses_for_materials_are_scoped(self, api_client, farmer_user, warehouse, other_warehouse):
        api_client.force_authenticate(user=farmer_user)

        response = api_client.get('/api/inventory/warehouses/')

        assert response.data == [{'id': str(warehouse.id), 'name': 'House 1', 'farm_name': 'North Farm'}]

    def test_farmer_cannot_read_other_farm_warehouse(self, api_client, farmer_user, farm, other_warehouse):
        api_client.force_authenticate(user=farmer_user)

        response = api_client.get(f'/api/inventory/reports/warehouse/{other_warehouse.id}/')

        assert response.status_code == 404


class TestInventoryReports:

    def test_summary_totals_every_column(self, api_client, sub_admin_user, warehouse, kg, corn, soy, make_stock):
        corn_stock = make_stock(warehouse, kg, 10, material_name=corn)
        make_stock(warehouse, kg, 5, material_name=soy)
        InventoryLedger().add_stock(corn_stock, 3, StockMovementType.PURCHASE)
        api_client.force_authenticate(user=sub_admin_user)

        response = api_client.get('/api/inventory/reports/summary/')

        assert response.status_code == 200
        assert Decimal(str(response.data['total_opening_balance'])) == Decimal('15')
        assert Decimal(str(response.data['total_purchases'])) == Decimal('3')
        assert Decimal(str(response.data['total_current_balance'])) == Decimal('18')
        assert response.data['materials_count'] == 2

    def test_full_report_orders_lowest_balance_first(self, admin_client, warehouse, kg, corn, soy, make_stock):
        make_stock(warehouse, kg, 50, material_name=corn)
        make_stock(warehouse, kg, 5, material_name=soy)

        response = admin_client.get('/api/inventory/reports/')

        assert response.status_code == 200
        assert [row['material_name'] for row in response.data] == ['Soybean meal', 'Corn']

    def test_stock_summary_counts_low_and_out_of_stock(self, admin_client, warehouse, kg, corn, soy,
                                                       feed_mix, make_stock):
        make_stock(warehouse, kg, 0, material_name=corn)
        make_stock(warehouse, kg, 10, material_name=soy)
        make_stock(warehouse, kg, 500, material_name=feed_mix)

        response = admin_client.get('/api/inventory/materials/summary/')

        assert response.data['total_materials'] == 3
        assert response.data['out_of_stock_count'] == 1
        assert response.data['low_stock_count'] == 1

    def test_aggregated_groups_item_across_warehouses(self, admin_client, warehouse, other_warehouse,
                                                      kg, corn, make_stock):
        make_stock(warehouse, kg, 10, material_name=corn)
        make_stock(other_warehouse, kg, 15, material_name=corn)

        response = admin_client.get('/api/inventory/materials/aggregated/')

        assert len(response.data) == 1
        row = response.data[0]
        assert row['material_name'] == 'Corn'
        assert row['unit_name'] == 'kg'
        assert row['current_balance'] == Decimal('25')
        assert row['warehouse_count'] == 2

    def test_farmer_cannot_read_full_report(self, farmer_client):
        response = farmer_client.get('/api/inventory/reports/')

        assert response.status_code == 403
