from .truck import TruckViewSet
from .driver import DriverViewSet
