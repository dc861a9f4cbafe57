from django.urls import path
from . import views

urlpatterns = [
    path('', views.user_list, name='userList'),
    path('create/', views.create_user, name='createUser'),
    path('<int:profile_id>/delete/', views.delete_user, name='deleteUser'),
]
