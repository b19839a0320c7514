from .assignment import AssignmentViewSet
from .discharge import DischargeViewSet
