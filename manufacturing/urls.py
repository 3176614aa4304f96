from django.urls import path

from . import views

app_name = 'manufacturing'

urlpatterns = [
    path('', views.ManufacturingInvoiceListCreateView.as_view(), name='manufacturing-list'),
    path('items/<uuid:item_id>/', views.ManufacturingItemDeleteView.as_view(), name='manufacturing-item-delete'),
    path('expenses/<uuid:expense_id>/', views.ManufacturingExpenseDeleteView.as_view(), name='manufacturing-expense-delete'),
    path('<uuid:pk>/', views.ManufacturingInvoiceDetailView.as_view(), name='manufacturing-detail'),
    path('<uuid:pk>/rollback/', views.ManufacturingRollbackView.as_view(), name='manufacturing-rollback'),
    path('<uuid:pk>/post-output/', views.ManufacturingPostOutputView.as_view(), name='manufacturing-post-output'),
    path('<uuid:pk>/items/', views.ManufacturingItemListCreateView.as_view(), name='manufacturing-items'),
    path('<uuid:pk>/expenses/', views.ManufacturingExpenseListCreateView.as_view(), name='manufacturing-expenses'),
    path('<uuid:pk>/attachments/', views.ManufacturingAttachmentsView.as_view(), name='manufacturing-attachments'),
    path(
        '<uuid:pk>/attachments/<uuid:attachment_id>/',
        views.ManufacturingAttachmentDeleteView.as_view(),
        name='manufacturing-attachment-delete'
    ),
]
