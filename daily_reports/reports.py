"""
General report over daily reports.

Filters (all optional): farm, start_date, end_date and period
(today | week | month | custom). Farmers are limited to their own farm.

Summaries:
- daily rows (paginated by the view)
- weekly totals; weeks start on Sunday
- monthly totals
- overall statistics
"""

from django.db.models import Count, Sum
from django.utils import timezone
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
import math

from .models import DailyReport

ZERO = Decimal('0.00')

MONTH_NAMES = [
    'يناير', 'فبراير', 'مارس', 'أبريل', 'مايو', 'يونيو',
    'يوليو', 'أغسطس', 'سبتمبر', 'أكتوبر', 'نوفمبر', 'ديسمبر',
]

PERIODS = ('today', 'week', 'month', 'custom')

TOTALS = {
    'total_eggs_produced': Sum('production_eggs'),
    'total_eggs_sold': Sum('eggs_sold'),
    'total_feed_consumed': Sum('feed_daily_kg'),
    'total_droppings_sold': Sum('production_droppings'),
    'total_mortality': Sum('chicks_dead'),
}


def week_start(day):
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_number(day):
    """Week of the year for ``day`` with Sunday-first weeks."""
    jan1 = day.replace(month=1, day=1)
    offset = (day - jan1).days
    jan1_weekday = (jan1.weekday() + 1) % 7  # Sunday = 0
    return math.ceil((offset + jan1_weekday + 1) / 7)


def average(total, count):
    if not count:
        return 0
    return int((Decimal(total or 0) / count).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def period_range(period, today=None):
    """(start, end) dates for a named period; custom returns (None, None)."""
    today = today or timezone.localdate()
    if period == 'today':
        return today, today
    if period == 'week':
        return week_start(today), today
    if period == 'month':
        return today.replace(day=1), today
    return None, None


def summarize_row(report):
    return {
        'id': str(report.id),
        'report_date': report.report_date,
        'farm_name': report.warehouse.farm.name if report.warehouse.farm_id else '-',
        'house_name': report.warehouse.name,
        'total_eggs_produced': report.production_eggs,
        'total_eggs_sold': report.eggs_sold,
        'total_feed_consumed': report.feed_daily_kg,
        'total_droppings_sold': report.production_droppings,
        'total_mortality': report.chicks_dead,
        'notes': report.notes,
    }


class GeneralReportService:

    def __init__(self, user, farm_id=None, start_date=None, end_date=None, period=None):
        if period and period not in PERIODS:
            raise ValueError(f"Period must be one of: {', '.join(PERIODS)}")
        if period and period != 'custom':
            start_date, end_date = period_range(period)

        self.user = user
        self.farm_id = farm_id
        self.start_date = start_date
        self.end_date = end_date

    def get_queryset(self):
        queryset = DailyReport.objects.select_related('warehouse__farm')

        if self.user.role not in ('ADMIN', 'SUB_ADMIN'):
            queryset = queryset.filter(warehouse__farm__user=self.user)
        if self.farm_id:
            queryset = queryset.filter(warehouse__farm_id=self.farm_id)
        if self.start_date:
            queryset = queryset.filter(report_date__gte=self.start_date)
        if self.end_date:
            queryset = queryset.filter(report_date__lte=self.end_date)

        return queryset.order_by('-report_date', '-report_time')

    def _totals(self, reports):
        totals = {key: ZERO for key in TOTALS}
        for report in reports:
            totals['total_eggs_produced'] += report.production_eggs
            totals['total_eggs_sold'] += report.eggs_sold
            totals['total_feed_consumed'] += report.feed_daily_kg
            totals['total_droppings_sold'] += report.production_droppings
            totals['total_mortality'] += report.chicks_dead
        totals['total_mortality'] = int(totals['total_mortality'])
        return totals

    def get_weekly(self):
        weeks = {}
        for report in self.get_queryset():
            weeks.setdefault(week_start(report.report_date), []).append(report)

        summaries = []
        for start, reports in weeks.items():
            totals = self._totals(reports)
            summaries.append({
                'week_start': start,
                'week_end': start + timedelta(days=6),
                'week_number': week_number(start),
                **totals,
                'daily_average_production': average(totals['total_eggs_produced'], len(reports)),
                'reports_count': len(reports),
            })

        summaries.sort(key=lambda s: s['week_start'], reverse=True)
        return summaries

    def get_monthly(self):
        months = {}
        for report in self.get_queryset():
            key = (report.report_date.year, report.report_date.month)
            months.setdefault(key, []).append(report)

        summaries = []
        for (year, month), reports in sorted(months.items(), reverse=True):
            totals = self._totals(reports)
            summaries.append({
                'month': MONTH_NAMES[month - 1],
                'month_number': month,
                'year': year,
                **totals,
                'daily_average_production': average(totals['total_eggs_produced'], len(reports)),
                'reports_count': len(reports),
            })
        return summaries

    def get_overall(self):
        stats = self.get_queryset().aggregate(total_reports=Count('id'), **TOTALS)
        total_reports = stats.pop('total_reports')
        overall = {key: value if value is not None else ZERO for key, value in stats.items()}
        overall['total_mortality'] = int(overall['total_mortality'])
        overall['average_daily_production'] = average(overall['total_eggs_produced'], total_reports)
        overall['total_reports'] = total_reports
        return overall
