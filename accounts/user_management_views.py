"""
User Management Admin Views

Provides administrative endpoints for:
- Listing users (admins and sub-admins)
- Creating, updating and deleting users
- Admin-initiated password reset
- Ban/unban (toggling is_active)
- Farmers not yet linked to a farm
"""

import logging

from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.response import Response

from .models import User
from .permissions import IsAdmin, IsAdminOrSubAdmin
from .serializers import (
    UserSerializer,
    UserCreateSerializer,
    UserUpdateSerializer,
    ResetPasswordSerializer,
)

logger = logging.getLogger(__name__)


class UserListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/users/   - list users (admin/sub-admin), ?role= filter
    POST /api/users/   - create a user (admin)
    """
    queryset = User.objects.select_related('farm').order_by('-date_joined')
    filterset_fields = ['role', 'is_active']
    search_fields = ['username', 'email', 'full_name']

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdmin()]
        return [IsAdminOrSubAdmin()]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserCreateSerializer
        return UserSerializer

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info(f"User {user.username} ({user.role}) created by {self.request.user.username}")


class UserDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET    /api/users/{id}/   - retrieve a user
    PATCH  /api/users/{id}/   - update full name, role, email
    DELETE /api/users/{id}/   - delete a user (never yourself)
    """
    queryset = User.objects.all()
    lookup_url_kwarg = 'user_id'

    def get_permissions(self):
        if self.request.method in ('GET', 'HEAD', 'OPTIONS'):
            return [IsAdminOrSubAdmin()]
        return [IsAdmin()]

    def get_serializer_class(self):
        if self.request.method in ('PUT', 'PATCH'):
            return UserUpdateSerializer
        return UserSerializer

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        super().update(request, *args, **kwargs)
        return Response(UserSerializer(self.get_object()).data)

    def destroy(self, request, *args, **kwargs):
        target_user = self.get_object()
        if target_user.pk == request.user.pk:
            return Response(
                {'error': 'Cannot delete yourself'},
                status=status.HTTP_400_BAD_REQUEST
            )
        username = target_user.username
        target_user.delete()
        logger.info(f"User {username} deleted by {request.user.username}")
        return Response({'message': 'User deleted successfully'}, status=status.HTTP_200_OK)


class AdminResetPasswordView(APIView):
    """
    POST /api/users/{user_id}/reset-password/

    Request Body:
    {
        "new_password": "secret123"
    }
    """
    permission_classes = [IsAdmin]

    def post(self, request, user_id):
        try:
            target_user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            return Response(
                {'error': 'User not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        target_user.set_password(serializer.validated_data['new_password'])
        target_user.save(update_fields=['password', 'updated_at'])

        logger.info(f"Password reset for {target_user.username} by {request.user.username}")
        return Response({'message': 'Password reset successfully'})


class AdminToggleUserStatusView(APIView):
    """
    POST /api/users/{user_id}/toggle-status/

    Bans an active user or unbans a banned one.
    """
    permission_classes = [IsAdmin]

    def post(self, request, user_id):
        try:
            target_user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            return Response(
                {'error': 'User not found'},
                status=status.HTTP_404_NOT_FOUND
            )

        if target_user.pk == request.user.pk:
            return Response(
                {'error': 'Cannot ban yourself'},
                status=status.HTTP_400_BAD_REQUEST
            )

        target_user.is_active = not target_user.is_active
        target_user.save(update_fields=['is_active', 'updated_at'])

        action = 'unbanned' if target_user.is_active else 'banned'
        logger.info(f"User {target_user.username} {action} by {request.user.username}")
        return Response({
            'message': f'User {action} successfully',
            'user_id': str(target_user.id),
            'is_active': target_user.is_active,
        })


class UsersWithoutFarmsView(generics.ListAPIView):
    """
    GET /api/users/without-farms/

    Farmers that are not yet linked to a farm, used by the farm form.
    """
    serializer_class = UserSerializer
    permission_classes = [IsAdminOrSubAdmin]
    pagination_class = None

    def get_queryset(self):
        return User.objects.filter(
            role=User.UserRole.FARMER,
            farm__isnull=True,
        ).order_by('username')
