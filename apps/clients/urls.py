from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ClientViewSet, ClientRegistrationView

app_name = 'clients'

router = DefaultRouter()
router.register(r'', ClientViewSet, basename='client')

urlpatterns = [
    # Anonymous self-registration through a link issued by the therapist
    path('register/<str:token>/', ClientRegistrationView.as_view(), name='client-registration'),
    path('', include(router.urls)),
]
