from django.urls import path

from . import views

app_name = 'catalog'

urlpatterns = [
    path('material-names/', views.MaterialNameListCreateView.as_view(), name='material-name-list'),
    path('material-names/<uuid:pk>/', views.MaterialNameDetailView.as_view(), name='material-name-detail'),
    path('units/', views.MeasurementUnitListCreateView.as_view(), name='unit-list'),
    path('units/<uuid:pk>/', views.MeasurementUnitDetailView.as_view(), name='unit-detail'),
    path('egg-weights/', views.EggWeightListCreateView.as_view(), name='egg-weight-list'),
    path('egg-weights/<uuid:pk>/', views.EggWeightDetailView.as_view(), name='egg-weight-detail'),
    path('expense-types/', views.ExpenseTypeListCreateView.as_view(), name='expense-type-list'),
    path('expense-types/<uuid:pk>/', views.ExpenseTypeDetailView.as_view(), name='expense-type-detail'),
    path('clients/', views.ClientListCreateView.as_view(), name='client-list'),
    path('clients/<uuid:pk>/', views.ClientDetailView.as_view(), name='client-detail'),
    path('medicines/', views.MedicineListCreateView.as_view(), name='medicine-list'),
    path('medicines/<uuid:pk>/', views.MedicineDetailView.as_view(), name='medicine-detail'),
]
