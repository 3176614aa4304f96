"""
Catalog (lookup table) endpoint tests.
"""

import pytest

from catalog.models import Client, MaterialName, Medicine

pytestmark = pytest.mark.django_db


class TestCatalogPermissions:

    def test_farmer_reads_catalog_unpaginated(self, farmer_client, corn, soy):
        response = farmer_client.get('/api/catalog/material-names/')

        assert response.status_code == 200
        assert sorted(row['material_name'] for row in response.data) == ['Corn', 'Soybean meal']

    def test_farmer_cannot_write(self, farmer_client):
        response = farmer_client.post('/api/catalog/material-names/', {'material_name': 'Barley'})

        assert response.status_code == 403

    def test_anonymous_is_rejected(self, api_client):
        assert api_client.get('/api/catalog/units/').status_code == 401


class TestCatalogValidation:

    def test_material_name_is_trimmed(self, admin_client):
        response = admin_client.post('/api/catalog/material-names/', {'material_name': '  Barley  '})

        assert response.status_code == 201
        assert MaterialName.objects.filter(material_name='Barley').exists()

    def test_duplicate_material_name(self, admin_client, corn):
        response = admin_client.post('/api/catalog/material-names/', {'material_name': 'Corn'})

        assert response.status_code == 400
        assert response.data['material_name'] == ['Material name already exists']

    def test_renaming_to_same_name_is_allowed(self, admin_client, corn):
        response = admin_client.patch(f'/api/catalog/material-names/{corn.id}/', {'material_name': 'Corn'})

        assert response.status_code == 200

    def test_short_names(self, admin_client):
        weight = admin_client.post('/api/catalog/egg-weights/', {'weight_range': 'A'})
        unit = admin_client.post('/api/catalog/units/', {'unit_name': '  '})

        assert weight.data['weight_range'] == ['Weight range must be at least 2 characters']
        assert unit.status_code == 400

    def test_single_character_unit_is_valid(self, admin_client):
        response = admin_client.post('/api/catalog/units/', {'unit_name': 'g'})

        assert response.status_code == 201

    def test_duplicate_expense_type(self, admin_client, transport):
        response = admin_client.post('/api/catalog/expense-types/', {'name': transport.name})

        assert response.data['name'] == ['Expense type already exists']

    def test_client_type_must_be_known(self, admin_client):
        response = admin_client.post('/api/catalog/clients/', {'name': 'Feed Supplier', 'type': 'partner'})

        assert response.status_code == 400
        assert response.data['type'] == ['Client type must be either customer or provider']

    def test_clients_filtered_by_type(self, admin_client, customer):
        Client.objects.create(name='Feed Supplier', type=Client.ClientType.PROVIDER)

        response = admin_client.get('/api/catalog/clients/?type=provider')

        assert [row['name'] for row in response.data] == ['Feed Supplier']
        assert response.data[0]['type_display'] == 'Provider'

    def test_medicine_needs_day_of_age(self, admin_client):
        missing = admin_client.post('/api/catalog/medicines/', {'name': 'Gumboro'})
        blank = admin_client.post('/api/catalog/medicines/', {'name': 'Gumboro', 'day_of_age': '  '})

        assert missing.data['day_of_age'] == ['Day of age is required']
        assert blank.data['day_of_age'] == ['Day of age is required']

    def test_medicine_created(self, admin_client):
        response = admin_client.post('/api/catalog/medicines/', {
            'name': 'Gumboro',
            'description': 'IBD vaccine',
            'day_of_age': '14, 28',
        })

        assert response.status_code == 201
        assert Medicine.objects.get(name='Gumboro').day_of_age == '14, 28'


class TestCatalogDelete:

    def test_unused_entry_is_deleted(self, admin_client, soy):
        response = admin_client.delete(f'/api/catalog/material-names/{soy.id}/')

        assert response.status_code == 204
        assert not MaterialName.objects.filter(pk=soy.pk).exists()

    def test_entry_used_by_stock_is_protected(self, admin_client, warehouse, kg, corn, make_stock):
        make_stock(warehouse, kg, 5, material_name=corn)

        response = admin_client.delete(f'/api/catalog/material-names/{corn.id}/')

        assert response.status_code == 400
        assert response.data['error'].endswith('cannot be deleted')
        assert MaterialName.objects.filter(pk=corn.pk).exists()
