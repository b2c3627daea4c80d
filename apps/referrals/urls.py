from django.urls import path
from . import views

app_name = 'referrals'

urlpatterns = [
    path('stats/', views.stats, name='stats'),
    path('', views.referral_list, name='referral-list'),
    path('payouts/', views.payout_list, name='payout-list'),
    path('payouts/process/', views.process, name='payout-process'),
]
