from django.contrib import admin
from django.urls import path, include
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

schema_view = get_schema_view(
    openapi.Info(
        title="Fuel Dispatch API",
        default_version='v1',
        description="Trucks, fuel assignments, customer discharges and dispatch numbers",
    ),
    public=True,
    permission_classes=[permissions.AllowAny],
    authentication_classes=[],
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/fleet/', include('fleet.urls')),
    path('api/customers/', include('customers.urls')),
    path('api/dispatches/', include('dispatches.urls')),
    path('api/', include('assignment.urls')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('swagger.json', schema_view.without_ui(cache_timeout=0), name='schema-json'),
]
