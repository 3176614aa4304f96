"""
Shared fixtures for the integration tests.

Every farm-scoped test starts from the same world: an admin, a sub-admin,
a farmer owning "North Farm" (with one warehouse and one poultry batch)
and a second farmer owning "South Farm". Catalog rows are created on demand.
"""

import pytest
from decimal import Decimal
from django.conf import settings as django_settings
from rest_framework.test import APIClient

from catalog.models import Client, EggWeight, ExpenseType, MaterialName, MeasurementUnit, Medicine
from farms.models import Farm, PoultryStatus, Warehouse
from inventory.models import Material


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Keep uploaded attachments out of the repository."""
    settings.MEDIA_ROOT = str(tmp_path)


@pytest.fixture
def api_client():
    return APIClient()


# ==============================================================================
# USERS
# ==============================================================================

@pytest.fixture
def admin_user(db, django_user_model):
    return django_user_model.objects.create_user(
        username='admin',
        email='admin@example.com',
        password='admin123',
        full_name='System Admin',
        role='ADMIN',
    )


@pytest.fixture
def sub_admin_user(db, django_user_model):
    return django_user_model.objects.create_user(
        username='reviewer',
        email='reviewer@example.com',
        password='review123',
        full_name='Report Reviewer',
        role='SUB_ADMIN',
    )


@pytest.fixture
def farmer_user(db, django_user_model):
    return django_user_model.objects.create_user(
        username='farmer',
        email='farmer@example.com',
        password='farmer123',
        full_name='North Farmer',
        role='FARMER',
    )


@pytest.fixture
def other_farmer(db, django_user_model):
    return django_user_model.objects.create_user(
        username='farmer2',
        email='farmer2@example.com',
        password='farmer123',
        full_name='South Farmer',
        role='FARMER',
    )


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def farmer_client(api_client, farmer_user):
    api_client.force_authenticate(user=farmer_user)
    return api_client


# ==============================================================================
# FARMS
# ==============================================================================

@pytest.fixture
def farm(farmer_user):
    return Farm.objects.create(user=farmer_user, name='North Farm', location='North')


@pytest.fixture
def warehouse(farm):
    return Warehouse.objects.create(farm=farm, name='House 1')


@pytest.fixture
def batch(farm):
    """Batch without a birth date, so no alerts are generated."""
    return PoultryStatus.objects.create(farm=farm, batch_name='Batch A', opening_chicks=1000)


@pytest.fixture
def other_farm(other_farmer):
    return Farm.objects.create(user=other_farmer, name='South Farm', location='South')


@pytest.fixture
def other_warehouse(other_farm):
    return Warehouse.objects.create(farm=other_farm, name='House 2')


# ==============================================================================
# CATALOG
# ==============================================================================

@pytest.fixture
def kg(db):
    return MeasurementUnit.objects.create(unit_name='kg')


@pytest.fixture
def egg_unit(db):
    return MeasurementUnit.objects.create(unit_name=django_settings.EGG_UNIT_NAME)


@pytest.fixture
def corn(db):
    return MaterialName.objects.create(material_name='Corn')


@pytest.fixture
def soy(db):
    return MaterialName.objects.create(material_name='Soybean meal')


@pytest.fixture
def feed_mix(db):
    return MaterialName.objects.create(material_name='Layer feed')


@pytest.fixture
def vaccine(db):
    return Medicine.objects.create(name='Newcastle vaccine', day_of_age='7, 21')


@pytest.fixture
def customer(db):
    return Client.objects.create(name='Market Co', type=Client.ClientType.CUSTOMER)


@pytest.fixture
def egg_weight(db):
    return EggWeight.objects.create(weight_range='1800-1900')


@pytest.fixture
def transport(db):
    return ExpenseType.objects.create(name='Transport')


# ==============================================================================
# STOCK
# ==============================================================================

@pytest.fixture
def make_stock():
    """Create a stock row with an opening balance."""
    def _make(warehouse, unit=None, opening=Decimal('0'), material_name=None, medicine=None):
        return Material.objects.create(
            warehouse=warehouse,
            material_name=material_name,
            medicine=medicine,
            unit=unit,
            opening_balance=Decimal(str(opening)),
            current_balance=Decimal(str(opening)),
        )
    return _make
