from decimal import Decimal

from django.test import TestCase

from customers.models import Customer
from fleet.models import Truck, Driver, FuelType
from assignment.services.assignment_service import create_assignment


class LedgerTestCase(TestCase):
    """A 3000 gal diesel truck loaded with 1000 gal for one driver."""

    def setUp(self):
        self.truck = Truck.objects.create(
            plate="ABC-123", name="Cisterna 1", fuel_type=FuelType.DIESEL_B5, capacity=Decimal('3000')
        )
        self.driver = Driver.objects.create(dni="45678912", name="Luis", lastname="Quispe")
        self.other_driver = Driver.objects.create(dni="40000002", name="Ana", lastname="Torres")
        self.customer = Customer.objects.create(
            company_name="Grifo Norte SAC", ruc="20123456789", address="Av. Túpac Amaru 123"
        )
        self.assignment = create_assignment(self.truck.id, self.driver.id, Decimal('1000'))

    def reload(self):
        self.assignment.refresh_from_db()
        self.truck.refresh_from_db()
        self.driver.refresh_from_db()
