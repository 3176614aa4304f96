from django.urls import path

from . import views

app_name = 'farms'

urlpatterns = [
    # Farms
    path('', views.FarmListCreateView.as_view(), name='farm-list'),
    path('mine/', views.MyFarmView.as_view(), name='my-farm'),
    path('without-warehouses/', views.FarmsWithoutWarehousesView.as_view(), name='farms-without-warehouses'),
    path('available-for-poultry/', views.FarmsAvailableForPoultryView.as_view(), name='farms-available-for-poultry'),
    path('setup/', views.CompleteFarmSetupView.as_view(), name='farm-setup'),
    path('<uuid:pk>/', views.FarmDetailView.as_view(), name='farm-detail'),

    # Warehouses
    path('warehouses/', views.WarehouseListCreateView.as_view(), name='warehouse-list'),
    path('warehouses/mine/', views.MyWarehousesView.as_view(), name='my-warehouses'),
    path('warehouses/<uuid:pk>/', views.WarehouseDetailView.as_view(), name='warehouse-detail'),

    # Poultry batches
    path('poultry/', views.PoultryListCreateView.as_view(), name='poultry-list'),
    path('poultry/<uuid:pk>/', views.PoultryDetailView.as_view(), name='poultry-detail'),
]
