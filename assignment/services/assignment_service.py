import logging

from django.db import DatabaseError, transaction
from django.db.models import Prefetch
from django.utils import timezone

from assignment.audit import AssignmentAudit
from assignment.models import Assignment, Discharge
from assignment.services.common import get_or_not_found, to_quantity
from fleet.models import Truck, TruckState, Driver, DriverState
from fleet.services.status_services import mark_truck_assigned, mark_driver_assigned
from logistics_core.exceptions import InvalidState, StoreFailure, ValidationError

logger = logging.getLogger(__name__)


def create_assignment(truck_id, driver_id, loaded_quantity, fuel_type=None, notes='') -> Assignment:
    """
    Load a truck and hand it to a driver.

    Fuel still on board from the truck's previous assignment is absorbed into
    the new one, so ``total_loaded`` is the leftover plus what was loaded now.
    """
    loaded = to_quantity(loaded_quantity, 'loaded_quantity')
    if loaded <= 0:
        raise ValidationError("loaded_quantity must be positive")

    try:
        with transaction.atomic():
            truck = get_or_not_found(Truck.objects.select_for_update(), truck_id, 'Truck')
            driver = get_or_not_found(Driver.objects.select_for_update(), driver_id, 'Driver')

            if truck.state != TruckState.ACTIVE:
                raise InvalidState(f"Truck {truck.plate} is {truck.state}")
            if driver.state != DriverState.ACTIVE:
                raise InvalidState(f"Driver {driver.full_name} is {driver.state}")
            if Assignment.objects.filter(truck=truck, is_completed=False).exists():
                raise InvalidState(f"Truck {truck.plate} already has an open assignment")

            fuel_type = fuel_type or truck.fuel_type
            if fuel_type != truck.fuel_type:
                raise ValidationError(f"Truck {truck.plate} runs on {truck.fuel_type}, not {fuel_type}")

            total = truck.last_remaining + loaded
            if total > truck.capacity:
                raise ValidationError(
                    f"{loaded} gal plus {truck.last_remaining} gal on board exceeds "
                    f"the {truck.capacity} gal capacity of truck {truck.plate}"
                )

            assignment = Assignment.objects.create(
                truck=truck,
                driver=driver,
                total_loaded=total,
                total_remaining=total,
                fuel_type=fuel_type,
                notes=notes or '',
                audit=AssignmentAudit(last_updated_at=timezone.now()).to_dict(),
            )

            truck.last_remaining = total
            truck.save(update_fields=['last_remaining', 'updated_at'])
            mark_truck_assigned(truck)
            mark_driver_assigned(driver)
    except DatabaseError as exc:
        logger.error(f"Creating assignment for truck {truck_id} failed: {exc}")
        raise StoreFailure(f"Could not create assignment for truck {truck_id}") from exc

    logger.info(
        f"Assignment {assignment.id} created: truck {truck.plate}, driver {driver.dni}, "
        f"{total} gal ({truck.last_remaining - loaded} carried over)"
    )
    return assignment


def assignments_visible_to(caller=None):
    """Assignments the caller may read; operators only see their own."""
    queryset = Assignment.objects.select_related('truck', 'driver')
    if caller is not None and not getattr(caller, 'is_admin', False):
        queryset = queryset.filter(driver_id=caller.id)
    return queryset


def get_assignment(assignment_id, caller=None) -> Assignment:
    queryset = assignments_visible_to(caller).prefetch_related(
        Prefetch('discharges', queryset=Discharge.objects.select_related('customer'))
    )
    return get_or_not_found(queryset, assignment_id, 'Assignment')
