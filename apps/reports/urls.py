from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('summary/', views.summary, name='summary'),
    path('revenue/', views.revenue_timeseries, name='revenue-timeseries'),
    path('top-clients/', views.top_clients, name='top-clients'),
    path('dashboard/', views.dashboard, name='dashboard'),

    # Staff
    path('platform/', views.platform_overview, name='platform-overview'),
]
