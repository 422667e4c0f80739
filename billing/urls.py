from django.urls import path
from . import views

app_name = 'billing'

urlpatterns = [
    path('reservations/<int:pk>/invoice/', views.invoice, name='invoice'),
]
