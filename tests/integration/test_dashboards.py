"""
Admin and farmer dashboard tests.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from daily_reports.models import DailyReport
from farms.models import PoultryStatus

pytestmark = pytest.mark.django_db


@pytest.fixture
def hatched_week_ago(farm, vaccine):
    """The vaccine's day 7 dose is due today and its day 21 dose in two weeks."""
    return PoultryStatus.objects.create(
        farm=farm,
        batch_name='Week Old',
        opening_chicks=800,
        chick_birth_date=timezone.localdate() - timedelta(days=7),
    )


class TestAdminDashboard:

    def test_overview_counts_and_low_stock(self, admin_client, warehouse, other_warehouse, kg,
                                           corn, soy, make_stock):
        make_stock(warehouse, kg, 5, material_name=corn)
        make_stock(other_warehouse, kg, 500, material_name=soy)
        DailyReport.objects.create(warehouse=warehouse, report_date=timezone.localdate())

        response = admin_client.get('/api/dashboards/admin/')

        assert response.status_code == 200
        counts = response.data['counts']
        assert counts['farms'] == 2
        assert counts['warehouses'] == 2
        assert counts['materials'] == 2
        assert counts['daily_reports'] == 1
        assert response.data['pending_reviews']['unchecked_reports'] == 1
        assert [row['item_name'] for row in response.data['low_stock']] == ['Corn']
        assert response.data['low_stock'][0]['current_balance'] == Decimal('5')
        assert response.data['recent_reports'][0]['farm_name'] == 'North Farm'

    def test_pending_alerts_stay_within_window(self, admin_client, hatched_week_ago):
        response = admin_client.get('/api/dashboards/admin/')

        alerts = response.data['pending_alerts']
        assert [alert['scheduled_day'] for alert in alerts] == [7]
        assert alerts[0]['days_until'] == 0

    def test_sub_admin_may_view(self, api_client, sub_admin_user):
        api_client.force_authenticate(user=sub_admin_user)

        assert api_client.get('/api/dashboards/admin/').status_code == 200

    def test_farmer_is_refused(self, farmer_client):
        assert farmer_client.get('/api/dashboards/admin/').status_code == 403


class TestFarmerDashboard:

    def test_overview_of_own_farm(self, farmer_client, farm, warehouse, hatched_week_ago):
        DailyReport.objects.create(warehouse=warehouse, report_date=timezone.localdate())

        response = farmer_client.get('/api/dashboards/farmer/')

        assert response.status_code == 200
        assert response.data['farm']['name'] == 'North Farm'
        assert response.data['warehouse']['name'] == 'House 1'
        assert response.data['poultry']['remaining_chicks'] == 800
        assert response.data['has_today_report'] is True
        assert [alert['priority'] for alert in response.data['upcoming_alerts']] == ['today', 'upcoming']

    def test_no_report_filed_today(self, farmer_client, farm, warehouse):
        response = farmer_client.get('/api/dashboards/farmer/')

        assert response.data['has_today_report'] is False
        assert response.data['poultry'] is None
        assert response.data['upcoming_alerts'] == []

    def test_farmer_without_farm(self, api_client, other_farmer):
        api_client.force_authenticate(user=other_farmer)

        response = api_client.get('/api/dashboards/farmer/')

        assert response.status_code == 404
        assert response.data['error'] == 'No farm assigned to your account'

    def test_admin_is_refused(self, admin_client):
        assert admin_client.get('/api/dashboards/farmer/').status_code == 403
