from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.utils import timezone
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for user details.
    Used for profile reads and the admin user list.
    """
    display_name = serializers.CharField(source='get_full_name', read_only=True)
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    farm_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'full_name', 'display_name',
            'role', 'role_display', 'is_active', 'farm_name',
            'date_joined', 'last_login_at', 'created_at'
        )
        read_only_fields = (
            'id', 'username', 'display_name', 'role_display', 'is_active',
            'farm_name', 'date_joined', 'last_login_at', 'created_at'
        )

    def get_farm_name(self, obj):
        farm = getattr(obj, 'farm', None)
        return farm.name if farm else None


class UserCreateSerializer(serializers.ModelSerializer):
    """
    Serializer for admin user creation.
    """
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ('id', 'username', 'email', 'password', 'full_name', 'role')
        read_only_fields = ('id',)
        extra_kwargs = {
            'email': {'required': True},
            'full_name': {'required': True},
        }

    def create(self, validated_data):
        """Create a new user with encrypted password."""
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class UserUpdateSerializer(serializers.ModelSerializer):
    """Admin update of name, role and email."""

    class Meta:
        model = User
        fields = ('full_name', 'role', 'email')


class ResetPasswordSerializer(serializers.Serializer):
    """Serializer for admin-initiated password reset."""
    new_password = serializers.CharField(
        required=True,
        write_only=True,
        validators=[validate_password]
    )


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Custom JWT token serializer that includes additional user information.
    """
    def validate(self, attrs):
        data = super().validate(attrs)

        data['user'] = {
            'id': str(self.user.id),
            'username': self.user.username,
            'email': self.user.email,
            'role': self.user.role,
            'full_name': self.user.get_full_name(),
        }

        # Update last login
        self.user.last_login_at = timezone.now()
        self.user.save(update_fields=['last_login_at'])

        return data
