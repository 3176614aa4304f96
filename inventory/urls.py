from django.urls import path

from . import views

app_name = 'inventory'

urlpatterns = [
    # Stock rows
    path('materials/', views.MaterialListCreateView.as_view(), name='material-list'),
    path('materials/aggregated/', views.MaterialAggregatedView.as_view(), name='material-aggregated'),
    path('materials/summary/', views.MaterialSummaryView.as_view(), name='material-summary'),
    path('materials/lookup/', views.MaterialLookupView.as_view(), name='material-lookup'),
    path('materials/<uuid:pk>/', views.MaterialDetailView.as_view(), name='material-detail'),
    path('materials/<uuid:pk>/movements/', views.MaterialMovementsView.as_view(), name='material-movements'),

    # Warehouse lookups
    path('warehouses/', views.MaterialWarehousesView.as_view(), name='material-warehouses'),
    path('warehouses/<uuid:warehouse_id>/medicines/', views.WarehouseMedicinesView.as_view(), name='warehouse-medicines'),
    path(
        'warehouses/<uuid:warehouse_id>/medicines/<uuid:medicine_id>/available/',
        views.AvailableMedicineQuantityView.as_view(),
        name='available-medicine-quantity'
    ),

    # Reports
    path('reports/', views.InventoryReportView.as_view(), name='inventory-report'),
    path('reports/summary/', views.InventorySummaryView.as_view(), name='inventory-summary'),
    path('reports/warehouse/<uuid:warehouse_id>/', views.WarehouseInventoryReportView.as_view(), name='warehouse-inventory-report'),
]
