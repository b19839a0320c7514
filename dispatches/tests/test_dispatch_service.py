from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from customers.models import Customer
from dispatches.models import Dispatch, DispatchSequence, DispatchStatus
from dispatches.services.dispatch_service import create_dispatch, dispatches_visible_to
from fleet.models import Truck, TruckState, Driver, FuelType
from logistics_core.authentication import CallerIdentity
from logistics_core.exceptions import InvalidState, NotFound, ResourceContention, StoreFailure, ValidationError


class DispatchTestCase(TestCase):

    def setUp(self):
        self.year = timezone.localdate().year
        DispatchSequence.objects.create(year=self.year, last_number=41)
        self.truck = Truck.objects.create(
            plate="ABC-123", fuel_type=FuelType.DIESEL_B5, capacity=Decimal('3000'), last_remaining=Decimal('500')
        )
        self.driver = Driver.objects.create(dni="45678912", name="Luis", lastname="Quispe")
        self.customer = Customer.objects.create(company_name="Grifo Norte SAC", ruc="20123456789")

    def counter(self):
        return DispatchSequence.objects.get(year=self.year).last_number


class CreateDispatchTest(DispatchTestCase):

    def test_create_dispatch(self):
        dispatch = create_dispatch(self.truck.id, self.driver.id, self.customer.id, '1200.5', notes="Turno mañana")
        self.truck.refresh_from_db()

        self.assertEqual(dispatch.number, f"PE-000042-{self.year}")
        self.assertEqual(dispatch.year, self.year)
        self.assertEqual(dispatch.sequence, 42)
        self.assertEqual(dispatch.status, DispatchStatus.PROGRAMADO)
        self.assertEqual(dispatch.fuel_type, FuelType.DIESEL_B5)
        self.assertEqual(dispatch.total_quantity, Decimal('1200.50'))
        self.assertEqual(dispatch.remaining_quantity, Decimal('1200.50'))
        self.assertEqual(self.truck.state, TruckState.ASSIGNED)
        # the ledger balance is not touched
        self.assertEqual(self.truck.last_remaining, Decimal('500.00'))
        self.assertEqual(self.counter(), 42)

    def test_consecutive_dispatches_get_consecutive_numbers(self):
        first = create_dispatch(self.truck.id, self.driver.id, self.customer.id, Decimal('100'))
        other = Truck.objects.create(plate="DEF-456", capacity=Decimal('2000'))
        second = create_dispatch(other.id, self.driver.id, self.customer.id, Decimal('100'))
        self.assertEqual((first.sequence, second.sequence), (42, 43))

    def test_quantity_above_free_capacity(self):
        with self.assertRaises(ValidationError):
            create_dispatch(self.truck.id, self.driver.id, self.customer.id, Decimal('2500.01'))
        self.assertEqual(self.counter(), 41)
        self.assertFalse(Dispatch.objects.exists())

    def test_invalid_quantities(self):
        for value in (0, '-5', 'mucho', '1e30'):
            with self.assertRaises(ValidationError):
                create_dispatch(self.truck.id, self.driver.id, self.customer.id, value)
        with self.assertRaises(ValidationError):
            create_dispatch(self.truck.id, self.driver.id, self.customer.id, 100, price_per_gallon='-1')
        self.assertEqual(self.counter(), 41)

    def test_fuel_type_must_match_truck(self):
        with self.assertRaises(ValidationError):
            create_dispatch(self.truck.id, self.driver.id, self.customer.id, 100, fuel_type=FuelType.GLP)

    def test_busy_truck_is_rejected(self):
        self.truck.state = TruckState.MAINTENANCE
        self.truck.save()
        with self.assertRaises(InvalidState):
            create_dispatch(self.truck.id, self.driver.id, self.customer.id, 100)
        self.assertEqual(self.counter(), 41)

    def test_unknown_references(self):
        with self.assertRaises(NotFound):
            create_dispatch(999999, self.driver.id, self.customer.id, 100)
        with self.assertRaises(NotFound):
            create_dispatch(self.truck.id, 999999, self.customer.id, 100)
        with self.assertRaises(NotFound):
            create_dispatch(self.truck.id, self.driver.id, 999999, 100)
        self.assertEqual(self.counter(), 41)

    @patch('dispatches.services.dispatch_service.mark_truck_assigned', side_effect=DatabaseError("disk I/O error"))
    def test_failure_after_numbering_rolls_back_the_counter(self, _):
        with self.assertRaises(StoreFailure):
            create_dispatch(self.truck.id, self.driver.id, self.customer.id, 100)
        self.truck.refresh_from_db()
        self.assertEqual(self.counter(), 41)
        self.assertFalse(Dispatch.objects.exists())
        self.assertEqual(self.truck.state, TruckState.ACTIVE)

    @patch('dispatches.services.dispatch_service.next_dispatch_number', side_effect=ResourceContention("busy"))
    def test_busy_counter_creates_nothing(self, _):
        with self.assertRaises(ResourceContention):
            create_dispatch(self.truck.id, self.driver.id, self.customer.id, 100)
        self.truck.refresh_from_db()
        self.assertFalse(Dispatch.objects.exists())
        self.assertEqual(self.truck.state, TruckState.ACTIVE)


class DispatchVisibilityTest(DispatchTestCase):

    def setUp(self):
        super().setUp()
        self.dispatch = create_dispatch(self.truck.id, self.driver.id, self.customer.id, 100)

    def test_admin_sees_every_dispatch(self):
        admin = CallerIdentity(id=1, role='admin')
        self.assertEqual(list(dispatches_visible_to(admin)), [self.dispatch])

    def test_operator_sees_only_own_dispatches(self):
        self.assertEqual(list(dispatches_visible_to(CallerIdentity(id=self.driver.id, role='operator'))),
                         [self.dispatch])
        self.assertEqual(list(dispatches_visible_to(CallerIdentity(id=self.driver.id + 1, role='operator'))), [])
