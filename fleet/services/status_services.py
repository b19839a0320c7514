import logging

from fleet.models import Truck, TruckState, Driver, DriverState

logger = logging.getLogger(__name__)


def update_truck_state(truck: Truck, new_state: str):
    if new_state not in TruckState.values:
        raise ValueError(f"Invalid truck state: {new_state}")
    previous = truck.state
    truck.state = new_state
    truck.save(update_fields=['state', 'updated_at'])
    if previous != new_state:
        logger.info(f"Truck {truck.plate}: {previous} -> {new_state}")


def mark_truck_active(truck: Truck):
    update_truck_state(truck, TruckState.ACTIVE)


def mark_truck_assigned(truck: Truck):
    update_truck_state(truck, TruckState.ASSIGNED)


def mark_truck_in_transit(truck: Truck):
    update_truck_state(truck, TruckState.IN_TRANSIT)


def mark_truck_maintenance(truck: Truck):
    update_truck_state(truck, TruckState.MAINTENANCE)


def update_driver_state(driver: Driver, new_state: str):
    if new_state not in DriverState.values:
        raise ValueError(f"Invalid driver state: {new_state}")
    driver.state = new_state
    driver.save(update_fields=['state', 'updated_at'])


def mark_driver_active(driver: Driver):
    update_driver_state(driver, DriverState.ACTIVE)


def mark_driver_assigned(driver: Driver):
    update_driver_state(driver, DriverState.ASSIGNED)
