from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'packages'

router = DefaultRouter()
router.register(r'', views.PackageViewSet, basename='package')

urlpatterns = [
    # GET    /api/packages/                 - List packages
    # POST   /api/packages/                 - Sell a package
    # GET    /api/packages/{id}/            - Package details
    # PATCH  /api/packages/{id}/            - Edit package
    # DELETE /api/packages/{id}/            - Delete package
    # GET    /api/packages/{id}/progress/   - Consumption
    # POST   /api/packages/{id}/schedule/   - Book sessions
    # GET    /api/packages/{id}/sessions/   - Booked sessions
    # POST   /api/packages/{id}/cancel/     - Cancel package
    path('', include(router.urls)),
]
