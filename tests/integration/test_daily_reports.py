"""
Daily report tests.

Covers:
- derived figures (egg total, egg rate, egg balance, chicks after)
- the integrated create: egg stock, sale invoices, droppings, medicine
  consumption and dead chicks in one transaction
- rollback of everything when one step fails
- chicks_before and monthly feed carried over from earlier reports
- review actions and permissions
"""

import pytest
from datetime import date
from decimal import Decimal

from daily_reports.models import DailyReport
from daily_reports.services import IntegratedDailyReportService, get_chicks_before, get_monthly_feed
from django.conf import settings
from inventory.models import Material, StockMovement, StockMovementType
from invoices.models import Invoice
from medications.models import MedicineConsumptionInvoice

pytestmark = pytest.mark.django_db


@pytest.fixture
def report_payload(warehouse):
    return {
        'warehouse': str(warehouse.id),
        'report_date': '2024-06-10',
        'production_eggs_healthy': '100',
        'production_eggs_deformed': '4',
        'eggs_sold': '30',
        'eggs_gift': '5',
        'chicks_dead': 10,
        'feed_daily_kg': '50',
        'production_droppings': '15',
    }


def egg_stock(warehouse):
    return Material.objects.get(warehouse=warehouse, material_name__material_name=settings.EGG_MATERIAL_NAME)


# ==============================================================================
# MODEL
# ==============================================================================

class TestDailyReportCompute:

    def test_derived_figures(self, warehouse):
        report = DailyReport(
            warehouse=warehouse,
            report_date=date(2024, 6, 1),
            production_eggs_healthy=Decimal('95'),
            production_eggs_deformed=Decimal('5'),
            eggs_sold=Decimal('40'),
            eggs_gift=Decimal('2'),
            previous_eggs_balance=Decimal('10'),
            chicks_before=300,
            chicks_dead=3,
        )

        report.compute()

        assert report.production_eggs == Decimal('100')
        assert report.production_egg_rate == Decimal('33.33')
        assert report.current_eggs_balance == Decimal('63')
        assert report.chicks_after == 297

    def test_rate_is_zero_without_chicks(self, warehouse):
        report = DailyReport(warehouse=warehouse, report_date=date(2024, 6, 1),
                             production_eggs_healthy=Decimal('10'))

        report.compute()

        assert report.production_egg_rate == Decimal('0')


# ==============================================================================
# INTEGRATED CREATE
# ==============================================================================

class TestIntegratedCreate:

    def test_report_books_eggs_and_deaths(self, farmer_client, warehouse, batch, egg_unit, report_payload):
        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 201
        assert response.data['message'] == 'Daily report and invoices created successfully'
        report = DailyReport.objects.get()
        assert report.chicks_before == 1000
        assert report.chicks_after == 990
        assert report.production_eggs == Decimal('104')
        assert report.production_egg_rate == Decimal('10.40')
        assert report.feed_monthly_kg == Decimal('50')

        stock = egg_stock(warehouse)
        assert stock.unit == egg_unit
        assert stock.purchases == Decimal('100')
        assert stock.consumption == Decimal('5')
        assert stock.current_balance == Decimal('95')

        batch.refresh_from_db()
        assert batch.dead_chicks == 10
        assert batch.remaining_chicks == 990

    def test_egg_sales_become_sell_invoices(self, farmer_client, warehouse, batch, egg_unit,
                                            customer, egg_weight, report_payload):
        report_payload['egg_sales'] = [
            {'client': str(customer.id), 'items': [
                {'egg_weight': str(egg_weight.id), 'unit': str(egg_unit.id), 'quantity': '20', 'price': '3'},
            ]},
            {'items': [{'quantity': '10', 'price': '2'}]},
        ]

        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 201
        assert len(response.data['invoice_ids']) == 2
        invoices = Invoice.objects.filter(invoice_type=Invoice.InvoiceType.SELL)
        assert invoices.count() == 2
        assert all(number.startswith('EGG-SALE-') for number in invoices.values_list('invoice_number', flat=True))
        assert sorted(invoices.values_list('total_items_value', flat=True)) == [Decimal('20'), Decimal('60')]
        assert egg_stock(warehouse).current_balance == Decimal('65')

    def test_droppings_are_produced_then_sold(self, admin_client, warehouse, batch, egg_unit, kg,
                                              customer, report_payload):
        report_payload['droppings_sale'] = {
            'client': str(customer.id), 'unit': str(kg.id), 'quantity': '10', 'price': '2',
        }

        response = admin_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 201
        droppings = Material.objects.get(material_name__material_name=settings.DROPPINGS_MATERIAL_NAME)
        assert droppings.purchases == Decimal('15')
        assert droppings.sales == Decimal('10')
        assert droppings.current_balance == Decimal('5')
        assert Invoice.objects.get().invoice_number.startswith('DROP-SALE-')

    def test_medicines_become_consumption_invoice(self, farmer_client, warehouse, batch, egg_unit, kg,
                                                  vaccine, make_stock, report_payload):
        make_stock(warehouse, kg, 6, medicine=vaccine)
        report_payload['poultry_status'] = str(batch.id)
        report_payload['medicines'] = [{'medicine': str(vaccine.id), 'quantity': '2', 'price': '5'}]

        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 201
        consumption = MedicineConsumptionInvoice.objects.get()
        assert str(consumption.id) == response.data['consumption_invoice_id']
        assert consumption.invoice_number.startswith('MED-CONS-')
        assert consumption.poultry_status == batch
        assert consumption.total_value == Decimal('10')
        assert Material.objects.get(medicine=vaccine).current_balance == Decimal('4')

    def test_failed_sale_rolls_everything_back(self, farmer_client, warehouse, batch, egg_unit, report_payload):
        report_payload['egg_sales'] = [{'items': [{'quantity': '500', 'price': '1'}]}]

        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 400
        assert response.data['error'].startswith('Insufficient stock')
        assert not DailyReport.objects.exists()
        assert not Invoice.objects.exists()
        assert not StockMovement.objects.exists()
        batch.refresh_from_db()
        assert batch.dead_chicks == 0

    def test_too_many_dead_chicks_rolls_back(self, farmer_client, warehouse, batch, egg_unit, report_payload):
        report_payload['chicks_dead'] = 1001

        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 400
        assert response.data['error'] == 'Dead chicks cannot exceed opening chicks'
        assert not DailyReport.objects.exists()

    def test_missing_egg_unit_is_reported(self, farmer_client, warehouse, batch, report_payload):
        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 400
        assert response.data['error'] == 'Default egg unit is not configured'

    def test_farmer_cannot_report_for_other_farm(self, api_client, farmer_user, farm, other_warehouse,
                                                 egg_unit, report_payload):
        report_payload['warehouse'] = str(other_warehouse.id)
        api_client.force_authenticate(user=farmer_user)

        response = api_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 403

    def test_batch_of_other_farm_is_rejected(self, farmer_client, warehouse, egg_unit, other_farm, report_payload):
        from farms.models import PoultryStatus
        foreign = PoultryStatus.objects.create(farm=other_farm, batch_name='Foreign', opening_chicks=10)
        report_payload['poultry_status'] = str(foreign.id)

        response = farmer_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 400
        assert response.data['error'] == 'Poultry batch does not belong to this farm'

    def test_sub_admin_cannot_create(self, api_client, sub_admin_user, warehouse, egg_unit, report_payload):
        api_client.force_authenticate(user=sub_admin_user)

        response = api_client.post('/api/daily-reports/', report_payload, format='json')

        assert response.status_code == 403


class TestCarriedOverFigures:

    def test_chicks_before_follows_previous_report(self, warehouse, batch, egg_unit, farmer_user):
        service = IntegratedDailyReportService(farmer_user)
        service.create_report(warehouse, report_date=date(2024, 6, 1), chicks_dead=7,
                              feed_daily_kg=Decimal('40'))

        assert get_chicks_before(warehouse) == 993

        second = service.create_report(warehouse, report_date=date(2024, 6, 2), chicks_dead=3,
                                       feed_daily_kg=Decimal('45'))['report']
        assert second.chicks_before == 993
        assert second.chicks_after == 990
        assert second.feed_monthly_kg == Decimal('85')

    def test_chicks_before_without_batch_is_zero(self, warehouse):
        assert get_chicks_before(warehouse) == 0

    def test_monthly_feed_ignores_other_months(self, warehouse, batch, egg_unit, farmer_user):
        IntegratedDailyReportService(farmer_user).create_report(
            warehouse, report_date=date(2024, 5, 31), feed_daily_kg=Decimal('40')
        )

        assert get_monthly_feed(warehouse, date(2024, 6, 1), Decimal('12')) == Decimal('12')

    def test_preview_endpoints(self, farmer_client, warehouse, batch):
        chicks = farmer_client.get(f'/api/daily-reports/chicks-before/?warehouse={warehouse.id}')
        feed = farmer_client.get(
            f'/api/daily-reports/monthly-feed/?warehouse={warehouse.id}&date=2024-06-10&daily_feed=25'
        )

        assert chicks.data == {'chicks_before': 1000}
        assert Decimal(str(feed.data['feed_monthly_kg'])) == Decimal('25')

    def test_monthly_feed_preview_requires_warehouse(self, farmer_client):
        assert farmer_client.get('/api/daily-reports/monthly-feed/?date=2024-06-10').status_code == 400

    def test_monthly_feed_preview_rejects_impossible_date(self, farmer_client, warehouse):
        response = farmer_client.get(
            f'/api/daily-reports/monthly-feed/?warehouse={warehouse.id}&date=2024-02-30&daily_feed=25'
        )

        assert response.status_code == 400
        assert 'date' in response.data


# ==============================================================================
# MAINTENANCE
# ==============================================================================

class TestReportMaintenance:

    @pytest.fixture
    def report(self, warehouse, batch, egg_unit, farmer_user):
        return IntegratedDailyReportService(farmer_user).create_report(
            warehouse, report_date=date(2024, 6, 1),
            production_eggs_healthy=Decimal('50'), chicks_dead=0,
        )['report']

    def test_patch_recomputes_figures(self, farmer_client, report):
        response = farmer_client.patch(f'/api/daily-reports/{report.id}/', {
            'production_eggs_deformed': '10',
        })

        assert response.status_code == 200
        report.refresh_from_db()
        assert report.production_eggs == Decimal('60')
        assert report.production_egg_rate == Decimal('6.00')

    def test_other_farmer_cannot_patch(self, api_client, other_farmer, report):
        api_client.force_authenticate(user=other_farmer)

        response = api_client.patch(f'/api/daily-reports/{report.id}/', {'notes': 'x'})

        assert response.status_code == 403

    def test_toggle_checked_by_reviewer(self, api_client, sub_admin_user, report):
        api_client.force_authenticate(user=sub_admin_user)

        response = api_client.post(f'/api/daily-reports/{report.id}/toggle-checked/')

        assert response.status_code == 200
        assert response.data == {'message': 'Report status updated', 'checked': True}

    def test_farmer_cannot_check_or_delete(self, farmer_client, report):
        assert farmer_client.post(f'/api/daily-reports/{report.id}/toggle-checked/').status_code == 403
        assert farmer_client.delete(f'/api/daily-reports/{report.id}/').status_code == 403

    def test_admin_delete_keeps_stock(self, admin_client, warehouse, report):
        response = admin_client.delete(f'/api/daily-reports/{report.id}/')

        assert response.status_code == 200
        assert response.data['message'] == 'Daily report deleted successfully'
        assert egg_stock(warehouse).current_balance == Decimal('50')

    def test_farmer_lists_own_reports(self, api_client, farmer_user, other_farmer, report):
        api_client.force_authenticate(user=other_farmer)
        assert api_client.get('/api/daily-reports/').data['count'] == 0

        api_client.force_authenticate(user=farmer_user)
        assert api_client.get('/api/daily-reports/').data['count'] == 1

    def test_production_movement_points_at_report(self, report):
        movement = StockMovement.objects.get(movement_type=StockMovementType.PRODUCTION)

        assert movement.source_type == 'DailyReport'
        assert movement.source_id == str(report.id)
