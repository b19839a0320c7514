from .assignment import Assignment, AssignmentStatus
from .discharge import Discharge, DischargeStatus, TERMINAL_DISCHARGE_STATUSES
from .trip import Trip, TripStatus
