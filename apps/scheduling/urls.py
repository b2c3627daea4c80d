from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'scheduling'

# Note: recurring must be registered BEFORE empty prefix to avoid URL conflicts
router = DefaultRouter()
router.register(r'recurring', views.RecurringSessionViewSet, basename='recurring')
router.register(r'', views.SessionViewSet, basename='session')

urlpatterns = [
    # Session routes
    # GET    /api/sessions/                  - List sessions
    # POST   /api/sessions/                  - Schedule a session
    # GET    /api/sessions/{id}/             - Session details
    # PATCH  /api/sessions/{id}/             - Edit a session
    # DELETE /api/sessions/{id}/             - Delete a session
    # POST   /api/sessions/{id}/status/      - Change status
    # GET    /api/sessions/needs-attention/  - Past sessions still scheduled

    # Recurring series routes
    # GET    /api/sessions/recurring/                        - List series
    # POST   /api/sessions/recurring/                        - Create series
    # PATCH  /api/sessions/recurring/{id}/                   - Change series
    # DELETE /api/sessions/recurring/{id}/                   - Delete series
    # GET    /api/sessions/recurring/{id}/instances/         - Generated sessions
    # POST   /api/sessions/recurring/{id}/generate/          - Fill the window
    # POST   /api/sessions/recurring/{id}/update-instances/  - Edit future sessions

    # Public booking
    # GET    /api/sessions/book/{slug}/  - Booking page
    # POST   /api/sessions/book/{slug}/  - Book anonymously
    path('book/<slug:slug>/', views.PublicBookingView.as_view(), name='public-booking'),
    path('', include(router.urls)),
]
