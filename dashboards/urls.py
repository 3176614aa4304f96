"""
Dashboard URL Configuration
"""

from django.urls import path

from .views import AdminDashboardView, FarmerDashboardView

app_name = 'dashboards'

urlpatterns = [
    path('admin/', AdminDashboardView.as_view(), name='admin-dashboard'),
    path('farmer/', FarmerDashboardView.as_view(), name='farmer-dashboard'),
]
