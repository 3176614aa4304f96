"""
Complete farm setup.

Creates, in a single transaction: the farmer account, the farm, its
warehouse, its first poultry batch and the opening stock rows for
materials and medicines. A stock line that cannot be created is skipped
and reported instead of aborting the whole setup.
"""

from django.contrib.auth import get_user_model
from django.db import transaction
import logging

from catalog.models import MaterialName, MeasurementUnit, Medicine
from inventory.services import MaterialService
from .models import Farm, Warehouse, PoultryStatus

logger = logging.getLogger(__name__)

User = get_user_model()


class FarmSetupError(Exception):
    """Setup input that prevents the farm from being created."""
    pass


class FarmSetupService:
    """Service for the one-shot farm setup wizard"""

    def __init__(self, user):
        self.user = user

    @transaction.atomic
    def create_complete_setup(self, data):
        """
        Args:
            data: validated CompleteFarmSetupSerializer payload

        Returns:
            dict: ids of every created record plus skipped stock lines
        """
        user_data = data['user']
        username = (user_data.get('username') or user_data['email']).strip()
        if User.objects.filter(username=username).exists():
            raise FarmSetupError(f"Failed to create user: username {username} already exists")

        farmer = User(
            username=username,
            email=user_data['email'],
            full_name=user_data['full_name'],
            role=User.UserRole.FARMER,
        )
        farmer.set_password(user_data['password'])
        farmer.save()

        farm_data = data['farm']
        farm = Farm.objects.create(
            user=farmer,
            name=farm_data['name'].strip(),
            location=farm_data.get('location', ''),
            is_active=farm_data.get('is_active', True),
        )

        warehouse = Warehouse.objects.create(
            farm=farm,
            name=data['warehouse']['name'].strip(),
        )

        poultry_data = data['poultry']
        poultry = PoultryStatus.objects.create(
            farm=farm,
            batch_name=poultry_data['batch_name'].strip(),
            opening_chicks=poultry_data['opening_chicks'],
            chick_birth_date=poultry_data.get('chick_birth_date'),
        )

        material_service = MaterialService(self.user)
        material_ids, material_errors = self._create_stock_lines(
            material_service, warehouse, data.get('materials', []), MaterialName, 'material_name'
        )
        medicine_ids, medicine_errors = self._create_stock_lines(
            material_service, warehouse, data.get('medicines', []), Medicine, 'medicine'
        )

        logger.info(
            f"Farm setup completed by {self.user.username}: farm {farm.name}, "
            f"{len(material_ids)} materials, {len(medicine_ids)} medicines"
        )

        return {
            'user_id': str(farmer.id),
            'farm_id': str(farm.id),
            'warehouse_id': str(warehouse.id),
            'poultry_id': str(poultry.id),
            'material_ids': material_ids,
            'medicine_ids': medicine_ids,
            'skipped': material_errors + medicine_errors,
        }

    def _create_stock_lines(self, material_service, warehouse, lines, item_model, item_field):
        created, skipped = [], []
        for index, line in enumerate(lines):
            item = item_model.objects.filter(pk=line['item_id']).first()
            unit = MeasurementUnit.objects.filter(pk=line['unit_id']).first()
            if item is None or unit is None:
                error = f"{item_field} {line['item_id']} or unit {line['unit_id']} not found"
            else:
                try:
                    material = material_service.create_material(
                        warehouse=warehouse,
                        unit=unit,
                        opening_balance=line['opening_balance'],
                        **{item_field: item}
                    )
                    created.append(str(material.id))
                    continue
                except ValueError as e:
                    error = str(e)

            logger.warning(f"Farm setup skipped {item_field} line {index}: {error}")
            skipped.append({'type': item_field, 'index': index, 'error': error})
        return created, skipped
