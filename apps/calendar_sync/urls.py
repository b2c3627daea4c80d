from django.urls import path
from . import views

app_name = 'calendar_sync'

urlpatterns = [
    # Connection
    path('status/', views.connection_status, name='status'),
    path('authorize/', views.authorize, name='authorize'),
    path('callback/', views.oauth_callback, name='callback'),
    path('connect/', views.connect_calendar, name='connect'),
    path('settings/', views.connection_settings, name='settings'),
    path('disconnect/', views.disconnect_calendar, name='disconnect'),

    # Events
    path('events/', views.calendar_events, name='events'),
    path('import/', views.import_calendar_events, name='import'),
    path('check-cancelled/', views.check_cancelled, name='check-cancelled'),

    # Session links
    path('sessions/<uuid:session_id>/send/', views.send_session, name='session-send'),
    path('sessions/<uuid:session_id>/unsync/', views.unsync, name='session-unsync'),
]
