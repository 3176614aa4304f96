from django.urls import path

from . import views

app_name = 'medications'

urlpatterns = [
    # Consumption invoices
    path('consumption/', views.ConsumptionInvoiceListCreateView.as_view(), name='consumption-list'),
    path('consumption/items/<uuid:item_id>/', views.ConsumptionItemDeleteView.as_view(), name='consumption-item-delete'),
    path(
        'consumption/expenses/<uuid:expense_id>/',
        views.ConsumptionExpenseDeleteView.as_view(),
        name='consumption-expense-delete'
    ),
    path('consumption/<uuid:pk>/', views.ConsumptionInvoiceDetailView.as_view(), name='consumption-detail'),
    path('consumption/<uuid:pk>/items/', views.ConsumptionItemListCreateView.as_view(), name='consumption-items'),
    path('consumption/<uuid:pk>/expenses/', views.ConsumptionExpenseListCreateView.as_view(), name='consumption-expenses'),
    path('consumption/<uuid:pk>/attachments/', views.ConsumptionAttachmentsView.as_view(), name='consumption-attachments'),
    path(
        'consumption/<uuid:pk>/attachments/<uuid:attachment_id>/',
        views.ConsumptionAttachmentDeleteView.as_view(),
        name='consumption-attachment-delete'
    ),

    # Alerts
    path('alerts/', views.AlertListView.as_view(), name='alert-list'),
    path('alerts/summary/', views.AlertSummaryView.as_view(), name='alert-summary'),
    path('alerts/active/', views.ActiveAlertsView.as_view(), name='alert-active'),
    path('alerts/upcoming/', views.UpcomingAlertsView.as_view(), name='alert-upcoming'),
    path('alerts/stats/', views.FarmAlertStatsView.as_view(), name='alert-stats'),
    path('alerts/chick-age/', views.ChickAgeView.as_view(), name='chick-age'),
    path('alerts/<uuid:pk>/', views.AlertDetailView.as_view(), name='alert-detail'),
    path('alerts/<uuid:pk>/administer/', views.AlertAdministerView.as_view(), name='alert-administer'),
    path('alerts/<uuid:pk>/unadminister/', views.AlertUnadministerView.as_view(), name='alert-unadminister'),
]
