"""
Serializers for farms, warehouses and poultry batches.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Farm, Warehouse, PoultryStatus

User = get_user_model()


# =============================================================================
# FARM SERIALIZERS
# =============================================================================

class FarmSerializer(serializers.ModelSerializer):
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True
    )
    user_name = serializers.CharField(source='user.get_full_name', read_only=True, allow_null=True)
    user_email = serializers.CharField(source='user.email', read_only=True, allow_null=True)

    class Meta:
        model = Farm
        fields = [
            'id', 'user', 'user_name', 'user_email', 'name', 'location',
            'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Farm name must be at least 2 characters")
        return value

    def validate_user(self, value):
        if value is None:
            return value
        existing = Farm.objects.filter(user=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("User already has a farm assigned")
        return value


# =============================================================================
# WAREHOUSE SERIALIZERS
# =============================================================================

class WarehouseSerializer(serializers.ModelSerializer):
    farm_name = serializers.CharField(source='farm.name', read_only=True)

    class Meta:
        model = Warehouse
        fields = ['id', 'farm', 'farm_name', 'name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'farm': {'error_messages': {'required': 'Farm is required', 'null': 'Farm is required'}},
        }

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Warehouse name must be at least 2 characters")
        return value

    def validate_farm(self, value):
        existing = Warehouse.objects.filter(farm=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("Farm already has a warehouse assigned")
        return value


# =============================================================================
# POULTRY SERIALIZERS
# =============================================================================

class PoultryStatusSerializer(serializers.ModelSerializer):
    farm_name = serializers.CharField(source='farm.name', read_only=True)

    class Meta:
        model = PoultryStatus
        fields = [
            'id', 'farm', 'farm_name', 'batch_name', 'opening_chicks',
            'dead_chicks', 'remaining_chicks', 'chick_birth_date',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'remaining_chicks', 'created_at', 'updated_at']
        validators = []
        extra_kwargs = {
            'farm': {'error_messages': {'required': 'Farm is required', 'null': 'Farm is required'}},
        }

    def validate_batch_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Batch name must be at least 2 characters")
        return value

    def validate_opening_chicks(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Opening chicks must be a positive number")
        return value

    def validate(self, attrs):
        farm = attrs.get('farm', getattr(self.instance, 'farm', None))
        batch_name = attrs.get('batch_name', getattr(self.instance, 'batch_name', None))
        if farm is not None and batch_name:
            existing = PoultryStatus.objects.filter(farm=farm, batch_name=batch_name)
            if self.instance is not None:
                existing = existing.exclude(pk=self.instance.pk)
            if existing.exists():
                raise serializers.ValidationError(
                    {'batch_name': "Batch name already exists for this farm"}
                )

        opening = attrs.get('opening_chicks', getattr(self.instance, 'opening_chicks', 0))
        dead = attrs.get('dead_chicks', getattr(self.instance, 'dead_chicks', 0))
        if dead > opening:
            raise serializers.ValidationError(
                {'dead_chicks': "Dead chicks cannot exceed opening chicks"}
            )
        return attrs


# =============================================================================
# COMPLETE FARM SETUP
# =============================================================================

class SetupUserSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    full_name = serializers.CharField()


class SetupFarmSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2)
    location = serializers.CharField(required=False, allow_blank=True, default='')
    is_active = serializers.BooleanField(required=False, default=True)


class SetupWarehouseSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2)


class SetupPoultrySerializer(serializers.Serializer):
    batch_name = serializers.CharField(min_length=2)
    opening_chicks = serializers.IntegerField(min_value=0)
    chick_birth_date = serializers.DateField(required=False, allow_null=True)


class SetupStockLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    unit_id = serializers.UUIDField()
    opening_balance = serializers.DecimalField(max_digits=12, decimal_places=2)


class CompleteFarmSetupSerializer(serializers.Serializer):
    """Payload for the one-shot farm setup wizard."""
    user = SetupUserSerializer()
    farm = SetupFarmSerializer()
    warehouse = SetupWarehouseSerializer()
    poultry = SetupPoultrySerializer()
    materials = SetupStockLineSerializer(many=True, required=False, default=list)
    medicines = SetupStockLineSerializer(many=True, required=False, default=list)
