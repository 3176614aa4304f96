"""
Medication Alert Service

Turns each medicine's day_of_age schedule into dated alerts for a poultry
batch and answers the questions the dashboards ask about them: what is due,
what is overdue, and how far along each farm is.
"""

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone
from datetime import timedelta
import logging
import re

from catalog.models import Medicine
from farms.models import Farm
from .models import MedicationAlert

logger = logging.getLogger(__name__)


class AlertPriority:
    OVERDUE = 'overdue'
    TODAY = 'today'
    TOMORROW = 'tomorrow'
    NORMAL = 'normal'
    NOT_URGENT = 'not_urgent'

    ORDER = {OVERDUE: 1, TODAY: 2, TOMORROW: 3, NORMAL: 4, NOT_URGENT: 5}


class AlertError(Exception):
    """Raised when an alert cannot be changed as requested."""
    pass


DAY_SEPARATORS = re.compile(r'[,\s،]+')


def parse_day_of_age(value):
    """
    Parse a day_of_age schedule into a sorted list of unique days.

    Accepts numbers separated by commas, whitespace or Arabic commas and
    ``a-b`` ranges: ``"1, 7-9،14"`` -> ``[1, 7, 8, 9, 14]``. Tokens that are
    not numbers are ignored.
    """
    days = set()
    for token in DAY_SEPARATORS.split(value or ''):
        if not token:
            continue
        if '-' in token:
            start, _, end = token.partition('-')
            if start.isdigit() and end.isdigit():
                low, high = sorted((int(start), int(end)))
                days.update(range(low, high + 1))
            continue
        if token.isdigit():
            days.add(int(token))
    return sorted(days)


def chick_age(birth_date, reference_date=None):
    """Age in days on ``reference_date`` (today by default), never negative."""
    if birth_date is None:
        return 0
    reference_date = reference_date or timezone.localdate()
    return max((reference_date - birth_date).days, 0)


def classify(days_until, days_ahead):
    if days_until < 0:
        return AlertPriority.OVERDUE
    if days_until == 0:
        return AlertPriority.TODAY
    if days_until == 1:
        return AlertPriority.TOMORROW
    if days_until <= days_ahead:
        return AlertPriority.NORMAL
    return AlertPriority.NOT_URGENT


class MedicationAlertService:

    def __init__(self, user=None):
        self.user = user

    # =========================================================================
    # GENERATION
    # =========================================================================

    def create_alerts_for_batch(self, batch):
        """
        Create one alert per (medicine, scheduled day) for ``batch``.

        Existing alerts are left alone, so calling this twice is harmless.
        Returns the number of alerts created.
        """
        if not batch.chick_birth_date:
            return 0

        existing = set(
            MedicationAlert.objects.filter(poultry_status=batch)
            .values_list('medicine_id', 'scheduled_day')
        )

        created = 0
        for medicine in Medicine.objects.exclude(day_of_age=''):
            for day in parse_day_of_age(medicine.day_of_age):
                if (medicine.id, day) in existing:
                    continue
                scheduled_date = batch.chick_birth_date + timedelta(days=day)
                try:
                    with transaction.atomic():
                        MedicationAlert.objects.create(
                            farm_id=batch.farm_id,
                            poultry_status=batch,
                            medicine=medicine,
                            scheduled_day=day,
                            scheduled_date=scheduled_date,
                            alert_date=scheduled_date - timedelta(days=1),
                        )
                except IntegrityError:
                    # Created concurrently
                    continue
                created += 1
        return created

    def clear_pending_alerts(self, batch):
        """Delete the batch's alerts that were not administered yet."""
        deleted, _ = MedicationAlert.objects.filter(
            poultry_status=batch, is_administered=False
        ).delete()
        return deleted

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_active_alerts(self, farm, days_ahead=None):
        """
        Pending alerts whose alert_date falls within ``days_ahead`` days,
        annotated with timing and priority, most urgent first.
        """
        days_ahead = settings.ALERT_DAYS_AHEAD if days_ahead is None else days_ahead
        today = timezone.localdate()

        alerts = MedicationAlert.objects.select_related('medicine').filter(
            farm=farm,
            is_administered=False,
            alert_date__lte=today + timedelta(days=days_ahead),
        ).order_by('scheduled_date')

        results = []
        for alert in alerts:
            days_until = (alert.scheduled_date - today).days
            results.append({
                'alert_id': str(alert.id),
                'medicine_id': str(alert.medicine_id),
                'medicine_name': alert.medicine.name,
                'medicine_description': alert.medicine.description or '',
                'scheduled_day': alert.scheduled_day,
                'scheduled_date': alert.scheduled_date,
                'alert_date': alert.alert_date,
                'is_administered': alert.is_administered,
                'days_until_scheduled': days_until,
                'is_overdue': days_until < 0,
                'priority': classify(days_until, days_ahead),
                'notes': alert.notes,
            })

        results.sort(key=lambda a: AlertPriority.ORDER[a['priority']])
        return results

    def get_upcoming_for_user(self, user):
        """
        Every overdue, today and tomorrow alert of the user's farm plus the
        next upcoming one.
        """
        today = timezone.localdate()
        alerts = MedicationAlert.objects.select_related('farm', 'medicine').filter(
            farm__user=user, is_administered=False
        ).order_by('scheduled_date')

        buckets = {
            AlertPriority.OVERDUE: [],
            AlertPriority.TODAY: [],
            AlertPriority.TOMORROW: [],
            'upcoming': [],
        }
        for alert in alerts:
            days_until = (alert.scheduled_date - today).days
            if days_until < 0:
                key = AlertPriority.OVERDUE
            elif days_until == 0:
                key = AlertPriority.TODAY
            elif days_until == 1:
                key = AlertPriority.TOMORROW
            else:
                key = 'upcoming'
            buckets[key].append({
                'alert_id': str(alert.id),
                'farm_id': str(alert.farm_id),
                'farm_name': alert.farm.name,
                'medicine_name': alert.medicine.name,
                'scheduled_date': alert.scheduled_date,
                'days_until': days_until,
                'priority': key,
            })

        return (
            buckets[AlertPriority.OVERDUE]
            + buckets[AlertPriority.TODAY]
            + buckets[AlertPriority.TOMORROW]
            + buckets['upcoming'][:1]
        )

    def get_farm_stats(self, farm):
        today = timezone.localdate()
        pending = Q(is_administered=False)
        return MedicationAlert.objects.filter(farm=farm).aggregate(
            total=Count('id'),
            completed=Count('id', filter=Q(is_administered=True)),
            pending=Count('id', filter=pending),
            overdue=Count('id', filter=pending & Q(scheduled_date__lt=today)),
            today=Count('id', filter=pending & Q(scheduled_date=today)),
            tomorrow=Count('id', filter=pending & Q(scheduled_date=today + timedelta(days=1))),
        )

    def get_summary(self):
        """Per-farm alert counts, farms with the most overdue alerts first."""
        summary = []
        for farm in Farm.objects.prefetch_related('poultry_batches'):
            stats = self.get_farm_stats(farm)
            if not stats['total']:
                continue
            batch = farm.poultry_batches.exclude(chick_birth_date=None).order_by('-created_at').first()
            birth_date = batch.chick_birth_date if batch else None
            summary.append({
                'farm_id': str(farm.id),
                'farm_name': farm.name,
                'chick_birth_date': birth_date,
                'current_chick_age': chick_age(birth_date),
                'total_alerts': stats['total'],
                'completed_alerts': stats['completed'],
                'pending_alerts': stats['pending'],
                'overdue_alerts': stats['overdue'],
                'today_alerts': stats['today'],
                'tomorrow_alerts': stats['tomorrow'],
            })

        summary.sort(key=lambda s: (s['overdue_alerts'], s['today_alerts']), reverse=True)
        return summary

    def list_for_admin(self, farm_id=None):
        queryset = MedicationAlert.objects.select_related('farm', 'medicine')
        if farm_id:
            queryset = queryset.filter(farm_id=farm_id)
        return queryset.order_by('-scheduled_date')

    # =========================================================================
    # UPDATES
    # =========================================================================

    @transaction.atomic
    def mark_administered(self, alert_id, notes=None):
        alert = MedicationAlert.objects.select_for_update().filter(pk=alert_id).first()
        if alert is None or alert.is_administered:
            raise AlertError("Alert not found or already administered")

        alert.is_administered = True
        alert.administered_at = timezone.now()
        if notes:
            alert.notes = notes
        alert.save()
        logger.info(f"Alert {alert.id} ({alert.medicine_id} day {alert.scheduled_day}) marked administered")
        return alert

    @transaction.atomic
    def unmark_administered(self, alert_id):
        alert = MedicationAlert.objects.select_for_update().filter(pk=alert_id).first()
        if alert is None:
            raise AlertError("Alert not found")

        alert.is_administered = False
        alert.administered_at = None
        alert.save()
        return alert

    def update_notes(self, alert, notes):
        alert.notes = notes or ''
        alert.save(update_fields=['notes', 'updated_at'])
        return alert
