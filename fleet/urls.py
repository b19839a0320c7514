from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import TruckViewSet, DriverViewSet

router = DefaultRouter()
router.register(r'trucks', TruckViewSet)
router.register(r'drivers', DriverViewSet)

urlpatterns = [
    path('', include(router.urls)),
]
