from django.contrib.auth.models import AbstractUser
from django.db import models
import uuid


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Three roles exist:
    - ADMIN: full read/write access to every farm
    - SUB_ADMIN: read access to every farm, no destructive writes
    - FARMER: access limited to the farm (and its warehouse) assigned to them
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class UserRole(models.TextChoices):
        ADMIN = 'ADMIN', 'Administrator'
        SUB_ADMIN = 'SUB_ADMIN', 'Sub Administrator'
        FARMER = 'FARMER', 'Farmer'

    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.FARMER,
        db_index=True,
        help_text="User's role in the system"
    )

    full_name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Display name shown on dashboards"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['role', 'is_active']),
        ]

    def __str__(self):
        return f"{self.get_full_name()} ({self.get_role_display()})"

    def get_full_name(self):
        """Return the display name, falling back to first/last name or username."""
        if self.full_name:
            return self.full_name
        full_name = super().get_full_name()
        return full_name if full_name else self.username

    @property
    def is_admin(self):
        return self.role == self.UserRole.ADMIN

    @property
    def is_sub_admin(self):
        return self.role == self.UserRole.SUB_ADMIN

    @property
    def is_farmer(self):
        return self.role == self.UserRole.FARMER

    @property
    def can_view_all_farms(self):
        """Admins and sub-admins can read data across every farm."""
        return self.role in (self.UserRole.ADMIN, self.UserRole.SUB_ADMIN)
