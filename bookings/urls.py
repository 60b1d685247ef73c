from django.urls import path
from . import views

urlpatterns = [
    path('', views.booking_collection, name='booking_collection'),
    path('check-conflict/', views.check_conflict, name='check_conflict'),
    path('calendar/<int:year>/<int:month>/', views.month_calendar, name='month_calendar'),
    path('date/<str:day>/', views.bookings_by_date, name='bookings_by_date'),
    path('date/<str:day>/availability/', views.date_availability, name='date_availability'),
    path('<str:booking_id>/', views.booking_detail, name='booking_detail'),
]
