from django.urls import path

from . import views

app_name = 'invoices'

urlpatterns = [
    path('', views.InvoiceListCreateView.as_view(), name='invoice-list'),
    path('items/<uuid:item_id>/', views.InvoiceItemDetailView.as_view(), name='invoice-item-detail'),
    path('expenses/<uuid:pk>/', views.InvoiceExpenseDetailView.as_view(), name='invoice-expense-detail'),
    path('<uuid:pk>/', views.InvoiceDetailView.as_view(), name='invoice-detail'),
    path('<uuid:pk>/items/', views.InvoiceItemListCreateView.as_view(), name='invoice-items'),
    path('<uuid:pk>/expenses/', views.InvoiceExpenseListCreateView.as_view(), name='invoice-expenses'),
    path('<uuid:pk>/attachments/', views.InvoiceAttachmentsView.as_view(), name='invoice-attachments'),
    path(
        '<uuid:pk>/attachments/<uuid:attachment_id>/',
        views.InvoiceAttachmentDeleteView.as_view(),
        name='invoice-attachment-delete'
    ),
]
