from decimal import Decimal

from django.test import TestCase

from fleet.models import Truck, TruckState, Driver, DriverState
from fleet.services.status_services import (
    update_truck_state, mark_truck_in_transit, mark_truck_active, mark_truck_maintenance,
    update_driver_state, mark_driver_assigned, mark_driver_active,
)


class TruckStatusServiceTest(TestCase):

    def setUp(self):
        self.truck = Truck.objects.create(plate="TRK-001", capacity=Decimal('2000'))

    def test_update_truck_state_persists(self):
        mark_truck_in_transit(self.truck)
        self.truck.refresh_from_db()
        self.assertEqual(self.truck.state, TruckState.IN_TRANSIT)

        mark_truck_active(self.truck)
        self.truck.refresh_from_db()
        self.assertEqual(self.truck.state, TruckState.ACTIVE)

    def test_update_truck_state_rejects_unknown_state(self):
        with self.assertRaises(ValueError):
            update_truck_state(self.truck, 'flying')
        self.truck.refresh_from_db()
        self.assertEqual(self.truck.state, TruckState.ACTIVE)

    def test_state_change_is_logged(self):
        with self.assertLogs('fleet.services.status_services', level='INFO') as logs:
            mark_truck_maintenance(self.truck)
        self.assertIn("TRK-001: active -> maintenance", logs.output[0])

    def test_state_change_does_not_touch_remaining(self):
        Truck.objects.filter(pk=self.truck.pk).update(last_remaining=Decimal('150'))
        mark_truck_in_transit(self.truck)
        self.truck.refresh_from_db()
        self.assertEqual(self.truck.last_remaining, Decimal('150'))


class DriverStatusServiceTest(TestCase):

    def setUp(self):
        self.driver = Driver.objects.create(dni="40000001", name="Ana", lastname="Torres")

    def test_mark_driver_assigned_and_back(self):
        mark_driver_assigned(self.driver)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.state, DriverState.ASSIGNED)

        mark_driver_active(self.driver)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.state, DriverState.ACTIVE)

    def test_update_driver_state_rejects_unknown_state(self):
        with self.assertRaises(ValueError):
            update_driver_state(self.driver, 'retired')
