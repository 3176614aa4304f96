from rest_framework import serializers

from .models import (
    MaterialName,
    MeasurementUnit,
    EggWeight,
    ExpenseType,
    Client,
    Medicine,
)


class UniqueNameMixin:
    """
    Validates the model's name column: trimmed, at least ``min_length``
    characters and unique (case-sensitive) among other rows.
    """
    name_field = 'name'
    name_label = 'Name'
    min_length = 2

    def _validate_unique_name(self, value):
        value = (value or '').strip()
        if len(value) < self.min_length:
            if self.min_length == 1:
                raise serializers.ValidationError(f"{self.name_label} is required")
            raise serializers.ValidationError(
                f"{self.name_label} must be at least {self.min_length} characters"
            )
        existing = self.Meta.model.objects.filter(**{self.name_field: value})
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError(f"{self.name_label} already exists")
        return value


class MaterialNameSerializer(UniqueNameMixin, serializers.ModelSerializer):
    name_field = 'material_name'
    name_label = 'Material name'

    class Meta:
        model = MaterialName
        fields = ['id', 'material_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'material_name': {'validators': []}}

    def validate_material_name(self, value):
        return self._validate_unique_name(value)


class MeasurementUnitSerializer(UniqueNameMixin, serializers.ModelSerializer):
    name_field = 'unit_name'
    name_label = 'Unit name'
    min_length = 1

    class Meta:
        model = MeasurementUnit
        fields = ['id', 'unit_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'unit_name': {'validators': []}}

    def validate_unit_name(self, value):
        return self._validate_unique_name(value)


class EggWeightSerializer(UniqueNameMixin, serializers.ModelSerializer):
    name_field = 'weight_range'
    name_label = 'Weight range'

    class Meta:
        model = EggWeight
        fields = ['id', 'weight_range', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'weight_range': {'validators': []}}

    def validate_weight_range(self, value):
        return self._validate_unique_name(value)


class ExpenseTypeSerializer(UniqueNameMixin, serializers.ModelSerializer):
    name_label = 'Expense type'

    class Meta:
        model = ExpenseType
        fields = ['id', 'name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'name': {'validators': []}}

    def validate_name(self, value):
        return self._validate_unique_name(value)


class ClientSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    type = serializers.ChoiceField(
        choices=Client.ClientType.choices,
        error_messages={'invalid_choice': 'Client type must be either customer or provider'}
    )

    class Meta:
        model = Client
        fields = ['id', 'name', 'type', 'type_display', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Client name must be at least 2 characters")
        return value


class MedicineSerializer(UniqueNameMixin, serializers.ModelSerializer):
    name_label = 'Medicine name'

    class Meta:
        model = Medicine
        fields = ['id', 'name', 'description', 'day_of_age', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'validators': []},
            'day_of_age': {
                'allow_blank': True,
                'error_messages': {'required': 'Day of age is required'},
            },
        }

    def validate_name(self, value):
        return self._validate_unique_name(value)

    def validate_day_of_age(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError("Day of age is required")
        return value
