import logging

from django.db import DatabaseError, transaction

from assignment.services.common import get_or_not_found, to_quantity
from customers.models import Customer
from dispatches.models import Dispatch, DispatchStatus
from dispatches.services.numbering import next_dispatch_number
from fleet.models import Truck, TruckState, Driver
from fleet.services.status_services import mark_truck_assigned
from logistics_core.exceptions import InvalidState, StoreFailure, ValidationError

logger = logging.getLogger(__name__)


def create_dispatch(truck_id, driver_id, customer_id, total_quantity, fuel_type=None,
                    price_per_gallon=None, scheduled_date=None, notes='') -> Dispatch:
    """
    Schedule a delivery under a freshly reserved dispatch number.

    The number, the dispatch row and the truck's switch to ``assigned`` are
    committed together; if any step fails the counter is not advanced.
    """
    quantity = to_quantity(total_quantity, 'total_quantity')
    if quantity <= 0:
        raise ValidationError("total_quantity must be positive")
    price = None if price_per_gallon is None else to_quantity(price_per_gallon, 'price_per_gallon')
    if price is not None and price < 0:
        raise ValidationError("price_per_gallon cannot be negative")

    try:
        with transaction.atomic():
            truck = get_or_not_found(Truck.objects.select_for_update(), truck_id, 'Truck')
            driver = get_or_not_found(Driver.objects.all(), driver_id, 'Driver')
            customer = get_or_not_found(Customer.objects.all(), customer_id, 'Customer')

            if truck.state != TruckState.ACTIVE:
                raise InvalidState(f"Truck {truck.plate} is {truck.state}")

            fuel_type = fuel_type or truck.fuel_type
            if fuel_type != truck.fuel_type:
                raise ValidationError(f"Truck {truck.plate} runs on {truck.fuel_type}, not {fuel_type}")
            if quantity > truck.free_capacity:
                raise ValidationError(
                    f"{quantity} gal exceeds the free capacity of truck {truck.plate} ({truck.free_capacity} gal)"
                )

            number = next_dispatch_number()
            dispatch = Dispatch.objects.create(
                number=str(number),
                year=number.year,
                sequence=number.sequence,
                status=DispatchStatus.PROGRAMADO,
                truck=truck,
                driver=driver,
                customer=customer,
                fuel_type=fuel_type,
                total_quantity=quantity,
                remaining_quantity=quantity,
                price_per_gallon=price,
                scheduled_date=scheduled_date,
                notes=notes or '',
            )
            mark_truck_assigned(truck)
    except DatabaseError as exc:
        logger.error(f"Creating dispatch for truck {truck_id} failed: {exc}")
        raise StoreFailure(f"Could not create dispatch for truck {truck_id}") from exc

    logger.info(f"Dispatch {dispatch.number} created: truck {truck.plate}, {quantity} gal to {customer.ruc}")
    return dispatch


def dispatches_visible_to(caller=None):
    """Dispatches the caller may read; operators only see the ones they drive."""
    queryset = Dispatch.objects.select_related('truck', 'driver', 'customer')
    if caller is not None and caller.is_operator:
        queryset = queryset.filter(driver_id=caller.id)
    return queryset
