"""
Buy/sell invoice tests.

Covers:
- buy items create stock rows and add PURCHASE movements
- sell items need covering stock
- deleting items and invoices reverses their stock effect
- totals kept by signals
- header, item and expense updates; type and warehouse frozen once items exist
- farm scoping and admin-only writes
- attachments
"""

import pytest
from decimal import Decimal
from django.core.files.uploadedfile import SimpleUploadedFile

from inventory.models import Material
from invoices.models import Invoice, InvoiceAttachment
from invoices.services import InvoiceService
from inventory.services import InsufficientStockError

pytestmark = pytest.mark.django_db


@pytest.fixture
def buy_invoice(warehouse, admin_user):
    return Invoice.objects.create(
        invoice_type=Invoice.InvoiceType.BUY,
        invoice_number='BUY-001',
        invoice_date='2024-03-01',
        warehouse=warehouse,
        created_by=admin_user,
    )


@pytest.fixture
def sell_invoice(warehouse, customer, admin_user):
    return Invoice.objects.create(
        invoice_type=Invoice.InvoiceType.SELL,
        invoice_number='SELL-001',
        invoice_date='2024-03-02',
        warehouse=warehouse,
        client=customer,
        created_by=admin_user,
    )


# ==============================================================================
# SERVICE
# ==============================================================================

class TestInvoiceStockEffects:

    def test_buy_item_creates_stock_row(self, buy_invoice, kg, corn, admin_user):
        InvoiceService(admin_user).add_item(buy_invoice, material_name=corn, unit=kg, quantity=10, price=3)

        stock = Material.objects.get(warehouse=buy_invoice.warehouse, material_name=corn)
        assert stock.purchases == Decimal('10')
        assert stock.current_balance == Decimal('10')
        assert stock.unit == kg

    def test_sell_item_reduces_stock(self, sell_invoice, kg, corn, make_stock, admin_user):
        stock = make_stock(sell_invoice.warehouse, kg, 10, material_name=corn)

        InvoiceService(admin_user).add_item(sell_invoice, material_name=corn, quantity=4, price=5)

        stock.refresh_from_db()
        assert stock.sales == Decimal('4')
        assert stock.current_balance == Decimal('6')

    def test_oversell_leaves_no_item(self, sell_invoice, kg, corn, make_stock, admin_user):
        make_stock(sell_invoice.warehouse, kg, 2, material_name=corn)

        with pytest.raises(InsufficientStockError):
            InvoiceService(admin_user).add_item(sell_invoice, material_name=corn, quantity=3)

        assert not sell_invoice.items.exists()

    def test_delete_item_reverses_sale(self, sell_invoice, kg, corn, make_stock, admin_user):
        stock = make_stock(sell_invoice.warehouse, kg, 10, material_name=corn)
        service = InvoiceService(admin_user)
        item = service.add_item(sell_invoice, material_name=corn, quantity=4)

        service.delete_item(item)

        stock.refresh_from_db()
        assert stock.sales == Decimal('0')
        assert stock.current_balance == Decimal('10')

    def test_delete_buy_invoice_after_stock_was_sold_is_refused(self, buy_invoice, sell_invoice,
                                                                kg, corn, admin_user):
        service = InvoiceService(admin_user)
        service.add_item(buy_invoice, material_name=corn, unit=kg, quantity=5)
        service.add_item(sell_invoice, material_name=corn, quantity=4)

        with pytest.raises(InsufficientStockError):
            service.delete_invoice(buy_invoice)

        assert Invoice.objects.filter(pk=buy_invoice.pk).exists()

    def test_invoice_without_warehouse_does_not_touch_stock(self, kg, corn, admin_user):
        invoice = Invoice.objects.create(
            invoice_type=Invoice.InvoiceType.BUY,
            invoice_number='BUY-NOWH',
            invoice_date='2024-03-01',
        )

        InvoiceService(admin_user).add_item(invoice, material_name=corn, unit=kg, quantity=5, price=2)

        assert not Material.objects.exists()
        invoice.refresh_from_db()
        assert invoice.total_items_value == Decimal('10')


class TestInvoiceTotals:

    def test_totals_follow_items_and_expenses(self, buy_invoice, kg, corn, transport, admin_user):
        service = InvoiceService(admin_user)
        item = service.add_item(buy_invoice, material_name=corn, unit=kg, quantity=10, price=Decimal('2.50'))
        buy_invoice.expenses.create(expense_type=transport, amount=Decimal('5'))

        buy_invoice.refresh_from_db()
        assert buy_invoice.total_items_value == Decimal('25')
        assert buy_invoice.total_expenses_value == Decimal('5')
        assert buy_invoice.net_value == Decimal('30')

        service.delete_item(item)
        buy_invoice.refresh_from_db()
        assert buy_invoice.total_items_value == Decimal('0')
        assert buy_invoice.net_value == Decimal('5')


# ==============================================================================
# API
# ==============================================================================

class TestInvoiceEndpoints:

    def test_farmer_creates_invoice_for_own_warehouse(self, farmer_client, warehouse):
        response = farmer_client.post('/api/invoices/', {
            'invoice_type': 'buy',
            'invoice_number': 'F-100',
            'invoice_date': '2024-03-05',
            'warehouse': str(warehouse.id),
        })

        assert response.status_code == 201
        assert response.data['items'] == []

    def test_farmer_cannot_target_other_warehouse(self, api_client, farmer_user, farm, other_warehouse):
        api_client.force_authenticate(user=farmer_user)

        response = api_client.post('/api/invoices/', {
            'invoice_type': 'buy',
            'invoice_number': 'F-101',
            'invoice_date': '2024-03-05',
            'warehouse': str(other_warehouse.id),
        })

        assert response.status_code == 403
        assert response.data['error'] == 'Unauthorized - Warehouse does not belong to your farm'

    def test_sub_admin_cannot_create_invoice(self, api_client, sub_admin_user, warehouse):
        api_client.force_authenticate(user=sub_admin_user)

        response = api_client.post('/api/invoices/', {
            'invoice_type': 'buy',
            'invoice_number': 'S-1',
            'invoice_date': '2024-03-05',
            'warehouse': str(warehouse.id),
        })

        assert response.status_code == 403

    def test_duplicate_invoice_number_is_rejected(self, admin_client, buy_invoice, warehouse):
        response = admin_client.post('/api/invoices/', {
            'invoice_type': 'buy',
            'invoice_number': 'BUY-001',
            'invoice_date': '2024-03-05',
            'warehouse': str(warehouse.id),
        })

        assert response.status_code == 400
        assert response.data['invoice_number'] == ['Invoice number already exists']

    def test_sell_item_without_stock_is_a_bad_request(self, admin_client, sell_invoice, corn):
        response = admin_client.post(f'/api/invoices/{sell_invoice.id}/items/', {
            'material_name': str(corn.id),
            'quantity': '2',
            'price': '10',
        })

        assert response.status_code == 400
        assert response.data['error'] == 'Material not found in warehouse inventory'

    def test_item_needs_material_or_medicine(self, admin_client, buy_invoice):
        response = admin_client.post(f'/api/invoices/{buy_invoice.id}/items/', {
            'quantity': '2',
            'price': '10',
        })

        assert response.status_code == 400
        assert response.data['error'] == 'Either material name or medicine must be provided'

    def test_delete_invoice_reverses_purchases(self, admin_client, buy_invoice, kg, corn, admin_user):
        InvoiceService(admin_user).add_item(buy_invoice, material_name=corn, unit=kg, quantity=6)

        response = admin_client.delete(f'/api/invoices/{buy_invoice.id}/')

        assert response.status_code == 200
        assert response.data['message'] == 'Invoice deleted successfully'
        stock = Material.objects.get(material_name=corn)
        assert stock.purchases == Decimal('0')
        assert stock.current_balance == Decimal('0')

    def test_farmer_cannot_delete_invoice(self, farmer_client, buy_invoice):
        response = farmer_client.delete(f'/api/invoices/{buy_invoice.id}/')

        assert response.status_code == 403

    def test_farmer_lists_only_own_invoices(self, api_client, farmer_user, buy_invoice, other_warehouse):
        Invoice.objects.create(
            invoice_type=Invoice.InvoiceType.BUY,
            invoice_number='OTHER-1',
            invoice_date='2024-03-01',
            warehouse=other_warehouse,
        )
        api_client.force_authenticate(user=farmer_user)

        response = api_client.get('/api/invoices/')

        assert [row['invoice_number'] for row in response.data['results']] == ['BUY-001']

    def test_other_farmer_cannot_read_invoice(self, api_client, other_farmer, other_farm, buy_invoice):
        api_client.force_authenticate(user=other_farmer)

        response = api_client.get(f'/api/invoices/{buy_invoice.id}/')

        assert response.status_code == 403


class TestInvoiceUpdates:

    def test_header_fields_can_be_edited(self, admin_client, buy_invoice):
        response = admin_client.patch(f'/api/invoices/{buy_invoice.id}/', {
            'notes': 'Delivered late',
            'checked': True,
        })

        assert response.status_code == 200
        assert response.data['notes'] == 'Delivered late'
        assert response.data['checked'] is True

    def test_keeping_own_number_is_allowed(self, admin_client, buy_invoice, sell_invoice):
        assert admin_client.patch(
            f'/api/invoices/{buy_invoice.id}/', {'invoice_number': 'BUY-001'}
        ).status_code == 200

        response = admin_client.patch(f'/api/invoices/{buy_invoice.id}/', {'invoice_number': 'SELL-001'})
        assert response.status_code == 400
        assert response.data['invoice_number'] == ['Invoice number already exists']

    def test_type_change_with_items_is_refused(self, admin_client, buy_invoice, kg, corn, admin_user):
        InvoiceService(admin_user).add_item(buy_invoice, material_name=corn, unit=kg, quantity=10)

        response = admin_client.patch(f'/api/invoices/{buy_invoice.id}/', {'invoice_type': 'sell'})

        assert response.status_code == 400
        assert response.data['error'] == 'Cannot change invoice_type of an invoice that already has items'
        buy_invoice.refresh_from_db()
        assert buy_invoice.invoice_type == Invoice.InvoiceType.BUY

        # deleting still reverses the purchase, leaving no phantom stock
        assert admin_client.delete(f'/api/invoices/{buy_invoice.id}/').status_code == 200
        stock = Material.objects.get(material_name=corn)
        assert stock.current_balance == Decimal('0')

    def test_warehouse_change_with_items_is_refused(self, admin_client, buy_invoice, kg, corn,
                                                    other_warehouse, admin_user):
        InvoiceService(admin_user).add_item(buy_invoice, material_name=corn, unit=kg, quantity=10)

        response = admin_client.patch(f'/api/invoices/{buy_invoice.id}/', {
            'warehouse': str(other_warehouse.id),
        })

        assert response.status_code == 400
        assert response.data['error'] == 'Cannot change warehouse of an invoice that already has items'
        buy_invoice.refresh_from_db()
        assert buy_invoice.warehouse_id == Material.objects.get(material_name=corn).warehouse_id

    def test_type_and_warehouse_editable_while_empty(self, admin_client, buy_invoice, other_warehouse):
        response = admin_client.patch(f'/api/invoices/{buy_invoice.id}/', {
            'invoice_type': 'sell',
            'warehouse': str(other_warehouse.id),
        })

        assert response.status_code == 200
        buy_invoice.refresh_from_db()
        assert buy_invoice.invoice_type == Invoice.InvoiceType.SELL
        assert buy_invoice.warehouse == other_warehouse

    def test_item_update_recomputes_value_only(self, admin_client, buy_invoice, kg, corn, admin_user):
        item = InvoiceService(admin_user).add_item(
            buy_invoice, material_name=corn, unit=kg, quantity=10, price=Decimal('2')
        )

        response = admin_client.patch(f'/api/invoices/items/{item.id}/', {
            'quantity': '12',
            'price': '3',
        })

        assert response.status_code == 200
        assert Decimal(response.data['value']) == Decimal('36')
        buy_invoice.refresh_from_db()
        assert buy_invoice.total_items_value == Decimal('36')
        stock = Material.objects.get(material_name=corn)
        assert stock.purchases == Decimal('10')
        assert stock.current_balance == Decimal('10')

    def test_farmer_cannot_update_other_farms_item(self, api_client, other_farmer, other_farm,
                                                  buy_invoice, kg, corn, admin_user):
        item = InvoiceService(admin_user).add_item(buy_invoice, material_name=corn, unit=kg, quantity=1)
        api_client.force_authenticate(user=other_farmer)

        response = api_client.patch(f'/api/invoices/items/{item.id}/', {'price': '9'})

        assert response.status_code == 403

    def test_expense_update_recomputes_totals(self, admin_client, buy_invoice, transport):
        expense = buy_invoice.expenses.create(expense_type=transport, amount=Decimal('5'))

        response = admin_client.patch(f'/api/invoices/expenses/{expense.id}/', {'amount': '8'})

        assert response.status_code == 200
        buy_invoice.refresh_from_db()
        assert buy_invoice.total_expenses_value == Decimal('8')
        assert buy_invoice.net_value == Decimal('8')

    def test_negative_expense_update_is_rejected(self, admin_client, buy_invoice, transport):
        expense = buy_invoice.expenses.create(expense_type=transport, amount=Decimal('5'))

        response = admin_client.patch(f'/api/invoices/expenses/{expense.id}/', {'amount': '-1'})

        assert response.status_code == 400
        assert response.data['amount'] == ['Amount cannot be negative']


class TestInvoiceAttachments:

    def test_upload_list_and_delete(self, admin_client, buy_invoice):
        upload = SimpleUploadedFile('receipt.pdf', b'%PDF-1.4 test', content_type='application/pdf')

        response = admin_client.post(
            f'/api/invoices/{buy_invoice.id}/attachments/', {'file': upload}, format='multipart'
        )
        assert response.status_code == 201
        assert response.data['file_name'] == 'receipt.pdf'
        assert response.data['file_type'] == 'application/pdf'

        listed = admin_client.get(f'/api/invoices/{buy_invoice.id}/attachments/')
        assert len(listed.data) == 1

        attachment_id = response.data['id']
        deleted = admin_client.delete(f'/api/invoices/{buy_invoice.id}/attachments/{attachment_id}/')
        assert deleted.status_code == 200
        assert not InvoiceAttachment.objects.exists()

    def test_disallowed_file_type_is_rejected(self, admin_client, buy_invoice):
        upload = SimpleUploadedFile('script.exe', b'MZ', content_type='application/octet-stream')

        response = admin_client.post(
            f'/api/invoices/{buy_invoice.id}/attachments/', {'file': upload}, format='multipart'
        )

        assert response.status_code == 400
        assert response.data['error'].startswith('File type not allowed')

    def test_missing_attachment_is_not_found(self, admin_client, buy_invoice):
        response = admin_client.delete(
            f'/api/invoices/{buy_invoice.id}/attachments/00000000-0000-0000-0000-000000000000/'
        )

        assert response.status_code == 404
        assert response.data == {'error': 'Attachment not found'}
