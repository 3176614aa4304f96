"""
Dashboard services module
"""

from .admin import AdminDashboardService
from .farmer import FarmerDashboardService

__all__ = [
    'AdminDashboardService',
    'FarmerDashboardService',
]
