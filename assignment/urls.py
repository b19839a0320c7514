from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import AssignmentViewSet, DischargeViewSet

router = DefaultRouter()
router.register(r'assignments', AssignmentViewSet, basename='assignment')
router.register(r'discharges', DischargeViewSet, basename='discharge')

urlpatterns = [
    path('', include(router.urls)),
]
