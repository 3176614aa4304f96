"""
Farm, warehouse and poultry batch models.

A farmer owns at most one farm; each farm holds one warehouse (its
poultry house) whose stock is tracked by the inventory app, and one or
more poultry batches whose birth dates drive the medication schedule.
"""

from django.conf import settings
from django.db import models
import uuid


class Farm(models.Model):
    """A poultry farm, optionally assigned to a single farmer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='farm',
        help_text="Farmer responsible for this farm"
    )
    name = models.CharField(max_length=200, help_text="Farm name")
    location = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'farms'
        ordering = ['-created_at']
        verbose_name = 'Farm'
        verbose_name_plural = 'Farms'

    def __str__(self):
        return self.name


class Warehouse(models.Model):
    """Storage location of a farm. Each farm has at most one."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    farm = models.ForeignKey(
        Farm,
        on_delete=models.CASCADE,
        related_name='warehouses'
    )
    name = models.CharField(max_length=200)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'warehouses'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.farm.name})"


class PoultryStatus(models.Model):
    """
    A poultry batch on a farm.

    remaining_chicks is kept as opening_chicks - dead_chicks on every save.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    farm = models.ForeignKey(
        Farm,
        on_delete=models.CASCADE,
        related_name='poultry_batches'
    )
    batch_name = models.CharField(max_length=100)
    opening_chicks = models.PositiveIntegerField(default=0)
    dead_chicks = models.PositiveIntegerField(default=0)
    remaining_chicks = models.IntegerField(default=0, editable=False)
    chick_birth_date = models.DateField(
        null=True,
        blank=True,
        help_text="Hatch date used to schedule medication alerts"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'poultry_status'
        ordering = ['-created_at']
        verbose_name = 'Poultry Batch'
        verbose_name_plural = 'Poultry Batches'
        unique_together = [['farm', 'batch_name']]

    def __str__(self):
        return f"{self.batch_name} - {self.farm.name}"

    def save(self, *args, **kwargs):
        self.remaining_chicks = self.opening_chicks - self.dead_chicks
        super().save(*args, **kwargs)
