from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'payments'

router = DefaultRouter()
router.register(r'', views.PaymentViewSet, basename='payment')

urlpatterns = [
    # GET    /api/payments/                  - List payments
    # POST   /api/payments/                  - Manual charge
    # GET    /api/payments/{id}/             - Payment details
    # PATCH  /api/payments/{id}/             - Edit due date, method, notes
    # POST   /api/payments/{id}/mark-paid/   - Settle
    # POST   /api/payments/{id}/cancel/      - Cancel
    # POST   /api/payments/{id}/refund/      - Refund
    # POST   /api/payments/{id}/pix/         - PIX BR Code + QR
    # GET    /api/payments/outstanding/      - Outstanding totals
    path('', include(router.urls)),
]
