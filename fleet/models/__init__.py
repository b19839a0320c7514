from .truck import Truck, TruckState, FuelType
from .driver import Driver, DriverState
