"""
Integrated Daily Report Service

Creating a daily report books everything that happened that day in one
transaction:

1. eggs: healthy production is PRODUCTION into the egg material, gifts are
   CONSUMPTION out of it
2. the report itself, with chicks_before and the monthly feed worked out
   from earlier reports
3. one sell invoice per egg sale (EGG-SALE-<ts>)
4. droppings production and its sell invoice (DROP-SALE-<ts>)
5. one medicine consumption invoice for the day (MED-CONS-<ts>)
6. the poultry batch's dead chicks

If any step fails (e.g. a sale larger than the stock) nothing is kept.
"""

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from decimal import Decimal
import logging

from catalog.models import MaterialName, MeasurementUnit
from farms.models import PoultryStatus
from farms.scoping import check_warehouse_access
from inventory.models import StockMovementType
from inventory.services import InventoryLedger
from invoices.models import Invoice
from invoices.services import InvoiceService
from medications.models import MedicineConsumptionInvoice
from medications.services import MedicineConsumptionService
from .models import DailyReport

logger = logging.getLogger(__name__)

REPORT_FIELDS = [
    'report_date', 'report_time',
    'production_eggs_healthy', 'production_eggs_deformed',
    'eggs_sold', 'eggs_gift', 'previous_eggs_balance', 'carton_consumption',
    'chicks_dead', 'feed_daily_kg', 'feed_ratio', 'production_droppings', 'notes',
]


def generate_invoice_number(prefix, model):
    """``<prefix>-<epoch millis>``, suffixed until it is unused in ``model``."""
    base = f"{prefix}-{int(timezone.now().timestamp() * 1000)}"
    number, suffix = base, 1
    while model.objects.filter(invoice_number=number).exists():
        number = f"{base}-{suffix}"
        suffix += 1
    return number


def get_farm_batch(warehouse):
    """The farm's current poultry batch (newest first), or None."""
    return PoultryStatus.objects.filter(farm_id=warehouse.farm_id).order_by('-created_at').first()


def get_chicks_before(warehouse):
    """
    Flock size at the start of a new report.

    The first report of a warehouse starts from the batch's remaining chicks;
    later reports continue from the last report's chicks_after.
    """
    last_report = DailyReport.objects.filter(warehouse=warehouse).order_by(
        '-report_date', '-report_time', '-created_at'
    ).first()
    if last_report is not None:
        return last_report.chicks_after

    batch = get_farm_batch(warehouse)
    return batch.remaining_chicks if batch else 0


def get_monthly_feed(warehouse, report_date, daily_feed):
    """Feed of the month's earlier reports in the warehouse plus ``daily_feed``."""
    previous = DailyReport.objects.filter(
        warehouse=warehouse,
        report_date__year=report_date.year,
        report_date__month=report_date.month,
    ).aggregate(total=Sum('feed_daily_kg'))['total'] or Decimal('0.00')
    return previous + Decimal(str(daily_feed or 0))


class IntegratedDailyReportService:

    def __init__(self, user):
        self.user = user
        self.ledger = InventoryLedger(user)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    @transaction.atomic
    def create_report(self, warehouse, egg_sales=None, droppings_sale=None,
                      medicines=None, poultry_status=None, **fields):
        """
        Create the report and its derived invoices and stock movements.

        Returns a dict with the report and the invoices created for it.

        Raises:
            PermissionDenied: farmer reporting on another farm's warehouse
            ValueError: missing egg unit, invalid quantities
            InventoryError: stock does not cover a sale, gift or medicine
        """
        check_warehouse_access(self.user, warehouse)
        if poultry_status is not None and poultry_status.farm_id != warehouse.farm_id:
            raise ValueError("Poultry batch does not belong to this farm")

        report = DailyReport(warehouse=warehouse, created_by=self.user)
        for name in REPORT_FIELDS:
            if name in fields:
                setattr(report, name, fields[name])

        report.chicks_before = get_chicks_before(warehouse)
        report.feed_monthly_kg = get_monthly_feed(warehouse, report.report_date, report.feed_daily_kg)
        report.compute()

        # Eggs
        egg_stock = self._egg_stock(warehouse)
        if report.production_eggs_healthy > 0:
            egg_stock = self.ledger.add_stock(
                egg_stock, report.production_eggs_healthy, StockMovementType.PRODUCTION,
                source=report, notes=f"Daily report {report.report_date}"
            )
        if report.eggs_gift > 0:
            egg_stock = self.ledger.remove_stock(
                egg_stock, report.eggs_gift, StockMovementType.CONSUMPTION,
                source=report, notes=f"Egg gifts {report.report_date}"
            )

        report.save()

        invoices = []
        for sale in egg_sales or []:
            invoices.append(self._create_egg_sale(report, egg_stock.material_name, sale))

        if droppings_sale and Decimal(str(droppings_sale.get('quantity') or 0)) > 0:
            invoices.append(self._create_droppings_sale(report, droppings_sale))

        consumption_invoice = None
        if medicines:
            consumption_invoice = self._create_medicine_consumption(report, medicines, poultry_status)

        if report.chicks_dead:
            self._record_deaths(warehouse, report.chicks_dead, poultry_status)

        logger.info(
            f"Daily report {report.report_date} created for warehouse {warehouse.name} "
            f"with {len(invoices)} sale invoice(s)"
        )
        return {
            'report': report,
            'invoices': invoices,
            'consumption_invoice': consumption_invoice,
        }

    def _egg_stock(self, warehouse):
        unit = MeasurementUnit.objects.filter(unit_name=settings.EGG_UNIT_NAME).first()
        if unit is None:
            raise ValueError("Default egg unit is not configured")

        egg_name, _ = MaterialName.objects.get_or_create(material_name=settings.EGG_MATERIAL_NAME)
        return self.ledger.get_or_create_stock(warehouse, unit, material_name=egg_name)

    def _new_sell_invoice(self, report, prefix, client=None):
        invoice = Invoice.objects.create(
            invoice_type=Invoice.InvoiceType.SELL,
            invoice_number=generate_invoice_number(prefix, Invoice),
            invoice_date=report.report_date,
            invoice_time=report.report_time,
            warehouse=report.warehouse,
            client=client,
            created_by=self.user,
        )
        logger.info(f"Generated sell invoice {invoice.invoice_number} from daily report {report.pk}")
        return invoice

    def _create_egg_sale(self, report, egg_name, sale):
        invoice = self._new_sell_invoice(report, 'EGG-SALE', sale.get('client'))
        service = InvoiceService(self.user)
        for item in sale.get('items', []):
            service.add_item(
                invoice,
                material_name=egg_name,
                unit=item.get('unit'),
                egg_weight=item.get('egg_weight'),
                quantity=item['quantity'],
                price=item.get('price') or 0,
            )
        return invoice

    def _create_droppings_sale(self, report, sale):
        droppings_name, _ = MaterialName.objects.get_or_create(
            material_name=settings.DROPPINGS_MATERIAL_NAME
        )
        stock = self.ledger.get_or_create_stock(
            report.warehouse, sale.get('unit'), material_name=droppings_name
        )
        if report.production_droppings > 0:
            self.ledger.add_stock(
                stock, report.production_droppings, StockMovementType.PRODUCTION,
                source=report, notes=f"Droppings of {report.report_date}"
            )

        invoice = self._new_sell_invoice(report, 'DROP-SALE', sale.get('client'))
        InvoiceService(self.user).add_item(
            invoice,
            material_name=droppings_name,
            unit=sale.get('unit'),
            quantity=sale['quantity'],
            price=sale.get('price') or 0,
        )
        return invoice

    def _create_medicine_consumption(self, report, medicines, poultry_status):
        service = MedicineConsumptionService(self.user)
        invoice = service.create_invoice(
            invoice_number=generate_invoice_number('MED-CONS', MedicineConsumptionInvoice),
            invoice_date=report.report_date,
            invoice_time=report.report_time,
            warehouse=report.warehouse,
            poultry_status=poultry_status,
            notes=report.notes,
        )
        for line in medicines:
            service.add_item(
                invoice,
                medicine=line['medicine'],
                unit=line.get('unit'),
                quantity=line['quantity'],
                price=line.get('price') or 0,
                administration_date=report.report_date,
            )
        logger.info(f"Generated medicine consumption {invoice.invoice_number} from daily report {report.pk}")
        return invoice

    def _record_deaths(self, warehouse, dead, poultry_status=None):
        batch = poultry_status or get_farm_batch(warehouse)
        if batch is None:
            logger.warning(f"No poultry batch on farm {warehouse.farm_id}; {dead} dead chicks not recorded")
            return

        batch = PoultryStatus.objects.select_for_update().get(pk=batch.pk)
        if batch.dead_chicks + dead > batch.opening_chicks:
            raise ValueError("Dead chicks cannot exceed opening chicks")
        batch.dead_chicks += dead
        batch.save()

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def update_report(self, report, **changes):
        """Apply field changes and recompute the egg and flock figures."""
        for name in REPORT_FIELDS + ['chicks_before', 'feed_monthly_kg']:
            if name in changes:
                setattr(report, name, changes[name])
        report.compute()
        report.save()
        return report

    def toggle_checked(self, report):
        report.checked = not report.checked
        report.save(update_fields=['checked', 'updated_at'])
        return report
