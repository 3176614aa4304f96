from django.urls import path

from .user_management_views import (
    UserListCreateView,
    UserDetailView,
    AdminResetPasswordView,
    AdminToggleUserStatusView,
    UsersWithoutFarmsView,
)

app_name = 'users'

urlpatterns = [
    path('', UserListCreateView.as_view(), name='user-list'),
    path('without-farms/', UsersWithoutFarmsView.as_view(), name='users-without-farms'),
    path('<uuid:user_id>/', UserDetailView.as_view(), name='user-detail'),
    path('<uuid:user_id>/reset-password/', AdminResetPasswordView.as_view(), name='user-reset-password'),
    path('<uuid:user_id>/toggle-status/', AdminToggleUserStatusView.as_view(), name='user-toggle-status'),
]
