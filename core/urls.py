"""
URL configuration for the Poultry Farm Operations project.

Every API lives under /api/. Each app owns its own urls.py and is mounted
here with a prefix matching its resource.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),  # Login, tokens, profile
    path('api/users/', include('accounts.user_urls')),  # Admin user management
    path('api/farms/', include('farms.urls')),  # Farms, warehouses, poultry, setup
    path('api/catalog/', include('catalog.urls')),  # Lookup tables
    path('api/inventory/', include('inventory.urls')),  # Stock rows and reports
    path('api/invoices/', include('invoices.urls')),  # Buy/sell invoices
    path('api/manufacturing/', include('manufacturing.urls')),  # Feed blending
    path('api/medications/', include('medications.urls')),  # Medicine consumption and alerts
    path('api/daily-reports/', include('daily_reports.urls')),  # Daily production
    path('api/dashboards/', include('dashboards.urls')),  # Admin/farmer overviews
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
