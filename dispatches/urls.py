from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import DispatchNumberViewSet, DispatchViewSet

router = DefaultRouter()
router.register(r'numbers', DispatchNumberViewSet, basename='dispatch-number')
router.register(r'records', DispatchViewSet, basename='dispatch')

urlpatterns = [
    path('', include(router.urls)),
]
