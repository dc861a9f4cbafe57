"""
Main URL configuration for Trackboard
Defines all URL patterns for the application
"""
from django.contrib import admin
from django.urls import path, include
from . import views
from attendance_app import views as attendanceViews
from batch_app import views as batchViews
from leaderboard_app import views as leaderboardViews

urlpatterns = [
    # Admin site
    path('admin/', admin.site.urls),

    # Admin panel home
    path('', views.home, name='home'),

    # Authentication
    path('login/', views.loginView, name='login'),
    path('logout/', views.logoutView, name='logout'),
    path('setup/', views.setupView, name='setup'),

    # Dashboard sections
    path('users/', include('accounts.urls')),
    path('batches/', include('batch_app.urls')),
    path('attendance/', include('attendance_app.urls')),
    path('', include('leaderboard_app.urls')),

    # Public read-only views
    path('public/<str:public_id>/', leaderboardViews.public_leaderboard, name='publicLeaderboard'),
    path('activeness/<str:public_id>/', leaderboardViews.public_activeness, name='publicActiveness'),
    path('attend/<str:session_code>/', attendanceViews.mark_attendance, name='attend'),
    path('batch-stats/<str:public_id>/', batchViews.public_batch_stats, name='publicBatchStats'),
    path('batch-stats/<str:public_id>/data/', batchViews.public_batch_stats_data, name='publicBatchStatsData'),
    path('batch-stats/<str:public_id>/export.csv', batchViews.public_batch_stats_csv, name='publicBatchStatsCsv'),
]

# Global HTML error handlers (JSON endpoints return their own errors).
handler400 = "trackboard_main.views.error_400"
handler403 = "trackboard_main.views.error_403"
handler404 = "trackboard_main.views.error_404"
handler500 = "trackboard_main.views.error_500"
