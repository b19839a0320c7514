from .truck import TruckSerializer
from .driver import DriverSerializer
