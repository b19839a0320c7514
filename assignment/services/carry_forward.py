import logging

from fleet.models import Truck
from assignment.models import Assignment
from logistics_core.exceptions import InvalidState

logger = logging.getLogger(__name__)


def reconcile_truck_remaining(truck: Truck, assignment: Assignment):
    """
    Copy the assignment's remaining balance onto the truck.

    Whatever is left after a finalized discharge stays on board and is
    absorbed into the truck's next assignment.
    """
    if assignment.truck_id != truck.id:
        raise InvalidState(f"Truck {truck.plate} does not own assignment {assignment.id}")
    if assignment.total_remaining > truck.capacity:
        raise InvalidState(
            f"Remaining {assignment.total_remaining} exceeds capacity {truck.capacity} of truck {truck.plate}"
        )

    previous = truck.last_remaining
    truck.last_remaining = assignment.total_remaining
    truck.save(update_fields=['last_remaining', 'updated_at'])
    logger.debug(f"Truck {truck.plate} carries {previous} -> {truck.last_remaining}")
