from django.urls import path
from . import views

urlpatterns = [
    path('login/', views.login, name='operator_login'),
    path('logout/', views.logout, name='operator_logout'),
    path('status/', views.session_status, name='operator_status'),
]
