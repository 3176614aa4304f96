"""
General report tests: week helpers, daily/weekly/monthly/overall summaries,
filters and farm scoping.
"""

import pytest
from datetime import date
from decimal import Decimal

from daily_reports.models import DailyReport
from daily_reports.reports import GeneralReportService, period_range, week_number, week_start

pytestmark = pytest.mark.django_db


@pytest.fixture
def make_report():
    def _make(warehouse, day, healthy=0, sold=0, feed=0, dead=0, droppings=0):
        report = DailyReport(
            warehouse=warehouse,
            report_date=day,
            production_eggs_healthy=Decimal(healthy),
            eggs_sold=Decimal(sold),
            feed_daily_kg=Decimal(feed),
            chicks_before=1000,
            chicks_dead=dead,
            production_droppings=Decimal(droppings),
        )
        report.compute()
        report.save()
        return report
    return _make


class TestWeekHelpers:

    def test_week_number_uses_sunday_first_weeks(self):
        assert week_number(date(2024, 1, 1)) == 1
        assert week_number(date(2024, 1, 6)) == 1
        assert week_number(date(2024, 1, 7)) == 2

    def test_week_start_is_previous_sunday(self):
        assert week_start(date(2024, 1, 3)) == date(2023, 12, 31)
        assert week_start(date(2024, 1, 7)) == date(2024, 1, 7)

    def test_period_ranges(self):
        today = date(2024, 6, 12)

        assert period_range('today', today) == (today, today)
        assert period_range('week', today) == (date(2024, 6, 9), today)
        assert period_range('month', today) == (date(2024, 6, 1), today)
        assert period_range('custom', today) == (None, None)

    def test_unknown_period_is_rejected(self, admin_user):
        with pytest.raises(ValueError, match='Period must be one of'):
            GeneralReportService(admin_user, period='year')


class TestGeneralSummaries:

    def test_daily_rows_are_paginated(self, admin_client, warehouse, make_report):
        make_report(warehouse, date(2024, 6, 3), healthy=80, feed=40, dead=2)
        make_report(warehouse, date(2024, 6, 4), healthy=90)

        response = admin_client.get('/api/daily-reports/general/daily/')

        assert response.status_code == 200
        assert response.data['count'] == 2
        first = response.data['results'][0]
        assert first['report_date'] == date(2024, 6, 4)
        assert first['farm_name'] == 'North Farm'
        assert first['house_name'] == 'House 1'

    def test_weekly_groups_newest_first(self, admin_client, warehouse, make_report):
        make_report(warehouse, date(2024, 6, 3), healthy=80, dead=2)
        make_report(warehouse, date(2024, 6, 5), healthy=91, dead=1)
        make_report(warehouse, date(2024, 6, 10), healthy=70)

        response = admin_client.get('/api/daily-reports/general/weekly/')

        assert response.status_code == 200
        newest, older = response.data
        assert newest['week_start'] == date(2024, 6, 9)
        assert newest['reports_count'] == 1
        assert older['week_start'] == date(2024, 6, 2)
        assert older['week_end'] == date(2024, 6, 8)
        assert older['total_eggs_produced'] == Decimal('171')
        assert older['total_mortality'] == 3
        assert older['daily_average_production'] == 86

    def test_monthly_uses_arabic_month_names(self, admin_client, warehouse, make_report):
        make_report(warehouse, date(2024, 5, 20), healthy=50, feed=30)
        make_report(warehouse, date(2024, 6, 3), healthy=60, feed=35)
        make_report(warehouse, date(2024, 6, 4), healthy=40, feed=25)

        response = admin_client.get('/api/daily-reports/general/monthly/')

        june, may = response.data
        assert (june['month'], june['month_number'], june['year']) == ('يونيو', 6, 2024)
        assert june['total_feed_consumed'] == Decimal('60')
        assert june['reports_count'] == 2
        assert may['month'] == 'مايو'

    def test_overall_statistics(self, admin_client, warehouse, make_report):
        make_report(warehouse, date(2024, 6, 3), healthy=80, sold=30, dead=2, droppings=5)
        make_report(warehouse, date(2024, 6, 4), healthy=90, sold=20, dead=1)

        response = admin_client.get('/api/daily-reports/general/overall/')

        assert response.data['total_reports'] == 2
        assert Decimal(str(response.data['total_eggs_produced'])) == Decimal('170')
        assert Decimal(str(response.data['total_eggs_sold'])) == Decimal('50')
        assert Decimal(str(response.data['total_droppings_sold'])) == Decimal('5')
        assert response.data['total_mortality'] == 3
        assert response.data['average_daily_production'] == 85

    def test_overall_without_reports(self, admin_client):
        response = admin_client.get('/api/daily-reports/general/overall/')

        assert response.data['total_reports'] == 0
        assert response.data['average_daily_production'] == 0

    def test_custom_date_range(self, admin_client, warehouse, make_report):
        make_report(warehouse, date(2024, 6, 1), healthy=10)
        make_report(warehouse, date(2024, 6, 15), healthy=20)

        response = admin_client.get(
            '/api/daily-reports/general/overall/?period=custom&start_date=2024-06-10&end_date=2024-06-30'
        )

        assert response.data['total_reports'] == 1

    def test_farm_filter(self, admin_client, warehouse, other_warehouse, other_farm, make_report):
        make_report(warehouse, date(2024, 6, 1), healthy=10)
        make_report(other_warehouse, date(2024, 6, 1), healthy=20)

        response = admin_client.get(f'/api/daily-reports/general/overall/?farm={other_farm.id}')

        assert response.data['total_reports'] == 1

    def test_farmer_sees_only_own_farm(self, api_client, farmer_user, warehouse, other_warehouse, make_report):
        make_report(warehouse, date(2024, 6, 1), healthy=10)
        make_report(other_warehouse, date(2024, 6, 1), healthy=20)
        api_client.force_authenticate(user=farmer_user)

        response = api_client.get('/api/daily-reports/general/overall/')

        assert response.data['total_reports'] == 1
        assert Decimal(str(response.data['total_eggs_produced'])) == Decimal('10')

    def test_invalid_period_is_a_bad_request(self, admin_client):
        response = admin_client.get('/api/daily-reports/general/weekly/?period=decade')

        assert response.status_code == 400
        assert response.data['error'].startswith('Period must be one of')

    def test_malformed_range_dates_are_a_bad_request(self, admin_client, warehouse, make_report):
        make_report(warehouse, date(2024, 6, 1), healthy=10)

        for query in ('start_date=yesterday', 'end_date=2024-06-31', 'period=custom&start_date=06/10/2024'):
            response = admin_client.get(f'/api/daily-reports/general/overall/?{query}')
            assert response.status_code == 400, query

        response = admin_client.get('/api/daily-reports/general/daily/?start_date=yesterday')
        assert response.status_code == 400
        assert 'start_date' in response.data
