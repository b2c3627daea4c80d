from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # User profile
    path('user/', views.current_user, name='current-user'),
    path('user/payout-details/', views.payout_details, name='payout-details'),
    path('user/payout-details/validate/', views.validate_payout, name='payout-details-validate'),

    # Notifications
    path('notifications/', views.notification_list, name='notification-list'),
    path('notifications/read-all/', views.notification_read_all, name='notification-read-all'),
    path('notifications/<uuid:pk>/read/', views.notification_read, name='notification-read'),
]
