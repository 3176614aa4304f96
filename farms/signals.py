"""
Poultry batch signals.

Medication alerts are generated from the batch's chick birth date, so they
are (re)built whenever a batch is created with a birth date or its birth
date changes.
"""

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver
import logging

from medications.alerts import MedicationAlertService
from .models import PoultryStatus

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=PoultryStatus)
def poultry_pre_save_track_birth_date(sender, instance, **kwargs):
    """Remember the stored birth date so post_save can detect a change."""
    instance._previous_birth_date = None
    if not instance._state.adding:
        instance._previous_birth_date = (
            PoultryStatus.objects.filter(pk=instance.pk)
            .values_list('chick_birth_date', flat=True)
            .first()
        )


@receiver(post_save, sender=PoultryStatus)
def poultry_saved_create_alerts(sender, instance, created, **kwargs):
    if not instance.chick_birth_date:
        return

    previous = getattr(instance, '_previous_birth_date', None)
    if not created and previous == instance.chick_birth_date:
        return

    service = MedicationAlertService()
    if not created:
        removed = service.clear_pending_alerts(instance)
        logger.info(f"Birth date of batch {instance.batch_name} changed; removed {removed} pending alerts")

    count = service.create_alerts_for_batch(instance)
    logger.info(f"Created {count} medication alerts for batch {instance.batch_name}")
