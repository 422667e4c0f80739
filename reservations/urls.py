from django.urls import path
from . import views

app_name = 'reservations'

urlpatterns = [
    path('', views.dashboard, name='dashboard'),
    path('new/', views.new_reservation, name='new_reservation'),
    path('availability/', views.room_availability, name='room_availability'),
    path('list/', views.reservation_list, name='reservation_list'),
    path('<int:pk>/', views.reservation_detail, name='reservation_detail'),
    path('<int:pk>/check-in/', views.check_in, name='check_in'),
    path('<int:pk>/check-out/', views.check_out, name='check_out'),
    path('<int:pk>/extend/', views.extend_stay, name='extend_stay'),
    path('<int:pk>/cancel/', views.cancel_reservation, name='cancel_reservation'),
]
