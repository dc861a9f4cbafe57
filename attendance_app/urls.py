from django.urls import path
from . import views

urlpatterns = [
    path('sessions/', views.session_manager, name='sessionManager'),
    path('sessions/create/', views.create_session, name='createSession'),
    path('sessions/<int:session_id>/toggle/', views.toggle_session, name='toggleSession'),
    path('sessions/<int:session_id>/qr.png', views.session_qr, name='sessionQr'),
    path('dashboard/', views.dashboard, name='dashboard'),
    path('dashboard/data/', views.dashboard_data, name='dashboardData'),
    path('dashboard/export.csv', views.export_dashboard_csv, name='exportDashboardCsv'),
    path('calendar/', views.calendar_view, name='attendanceCalendar'),
    path('view/<str:public_id>/', views.public_session_view, name='publicSessionView'),
]
