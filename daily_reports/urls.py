from django.urls import path

from . import views

app_name = 'daily_reports'

urlpatterns = [
    path('', views.DailyReportListCreateView.as_view(), name='report-list'),
    path('monthly-feed/', views.MonthlyFeedPreviewView.as_view(), name='monthly-feed'),
    path('chicks-before/', views.ChicksBeforePreviewView.as_view(), name='chicks-before'),

    # General report
    path('general/daily/', views.GeneralDailySummaryView.as_view(), name='general-daily'),
    path('general/weekly/', views.GeneralWeeklySummaryView.as_view(), name='general-weekly'),
    path('general/monthly/', views.GeneralMonthlySummaryView.as_view(), name='general-monthly'),
    path('general/overall/', views.GeneralOverallView.as_view(), name='general-overall'),

    path('<uuid:pk>/', views.DailyReportDetailView.as_view(), name='report-detail'),
    path('<uuid:pk>/toggle-checked/', views.DailyReportToggleCheckedView.as_view(), name='report-toggle-checked'),
    path('<uuid:pk>/attachments/', views.DailyReportAttachmentsView.as_view(), name='report-attachments'),
    path(
        '<uuid:pk>/attachments/<uuid:attachment_id>/',
        views.DailyReportAttachmentDeleteView.as_view(),
        name='report-attachment-delete'
    ),
]
