from django.urls import path
from . import views

urlpatterns = [
    path('', views.batch_list, name='batchList'),
    path('create/', views.create_batch, name='createBatch'),
    path('<uuid:batch_id>/toggle/', views.toggle_batch, name='toggleBatch'),
    path('<uuid:batch_id>/delete/', views.delete_batch, name='deleteBatch'),
    path('<uuid:batch_id>/students/add/', views.add_student, name='addStudent'),
    path('students/<int:student_id>/delete/', views.delete_student, name='deleteStudent'),

    # Statistics and share links
    path('stats/', views.batch_stats, name='batchStats'),
    path('stats/<uuid:batch_id>/export.csv', views.export_stats_csv, name='exportStatsCsv'),
    path('stats/<uuid:batch_id>/export.xlsx', views.export_stats_xlsx, name='exportStatsXlsx'),
    path('stats/<uuid:batch_id>/links/', views.generate_public_url, name='generatePublicUrl'),
    path('stats/links/<int:url_id>/revoke/', views.revoke_public_url, name='revokePublicUrl'),
]
