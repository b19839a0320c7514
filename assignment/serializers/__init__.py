from .discharge import DischargeSerializer, DischargeCreateSerializer, DischargeUpdateSerializer
from .assignment import AssignmentSerializer, AssignmentDetailSerializer, AssignmentCreateSerializer
