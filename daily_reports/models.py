"""
Daily production reports.

One report per warehouse visit: egg production and sales, flock mortality,
feed and droppings. Derived fields are filled by DailyReport.compute().
"""

from django.conf import settings
from django.db import models
from decimal import Decimal, ROUND_HALF_UP
import uuid

from core.attachments import Attachment

ZERO = Decimal('0.00')


class DailyReport(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    warehouse = models.ForeignKey(
        'farms.Warehouse',
        on_delete=models.CASCADE,
        related_name='daily_reports'
    )
    report_date = models.DateField(db_index=True)
    report_time = models.TimeField(null=True, blank=True)

    # Eggs (cartons)
    production_eggs_healthy = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    production_eggs_deformed = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    production_eggs = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    production_egg_rate = models.DecimalField(max_digits=7, decimal_places=2, default=ZERO)
    eggs_sold = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    eggs_gift = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    previous_eggs_balance = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    current_eggs_balance = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    carton_consumption = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    # Flock
    chicks_before = models.IntegerField(default=0)
    chicks_dead = models.PositiveIntegerField(default=0)
    chicks_after = models.IntegerField(default=0)

    # Feed
    feed_daily_kg = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    feed_monthly_kg = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    feed_ratio = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    production_droppings = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    notes = models.TextField(blank=True)
    checked = models.BooleanField(default=False, help_text="Reviewed by an administrator")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='daily_reports'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'daily_reports'
        ordering = ['-report_date', '-report_time']
        indexes = [
            models.Index(fields=['warehouse', '-report_date']),
        ]

    def __str__(self):
        return f"Report {self.report_date} - {self.warehouse.name}"

    def compute(self):
        """Fill production_eggs, egg rate, current egg balance and chicks_after."""
        self.production_eggs = self.production_eggs_healthy + self.production_eggs_deformed
        if self.chicks_before > 0:
            rate = self.production_eggs / Decimal(self.chicks_before) * 100
            self.production_egg_rate = rate.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        else:
            self.production_egg_rate = ZERO
        self.current_eggs_balance = (
            self.previous_eggs_balance
            + self.production_eggs_healthy
            - self.eggs_sold
            - self.eggs_gift
        )
        self.chicks_after = self.chicks_before - self.chicks_dead


def report_attachment_path(instance, filename):
    return f"daily-reports/{uuid.uuid4().hex}_{filename}"


class DailyReportAttachment(Attachment):
    daily_report = models.ForeignKey(
        DailyReport,
        on_delete=models.CASCADE,
        related_name='attachments'
    )
    file = models.FileField(upload_to=report_attachment_path, max_length=500)

    class Meta(Attachment.Meta):
        db_table = 'daily_report_attachments'
