from django.urls import path
from . import views

urlpatterns = [
    # Interview leaderboards
    path('leaderboards/', views.leaderboard_list, name='leaderboardList'),
    path('leaderboards/create/', views.create_leaderboard, name='createLeaderboard'),
    path('leaderboards/<int:board_id>/delete/', views.delete_leaderboard, name='deleteLeaderboard'),
    path('leaderboards/<int:board_id>/public/', views.toggle_leaderboard_public, name='toggleLeaderboardPublic'),
    path('leaderboards/<int:board_id>/rounds/add/', views.add_round, name='addRound'),
    path('leaderboards/rounds/<int:round_id>/update/', views.update_round, name='updateRound'),
    path('leaderboards/rounds/<int:round_id>/delete/', views.delete_round, name='deleteRound'),

    # Activeness boards
    path('activeness/boards/', views.activeness_list, name='activenessList'),
    path('activeness/boards/create/', views.create_activeness_board, name='createActivenessBoard'),
    path('activeness/boards/<int:board_id>/delete/', views.delete_activeness_board, name='deleteActivenessBoard'),
    path('activeness/boards/<int:board_id>/public/', views.toggle_activeness_public, name='toggleActivenessPublic'),
    path('activeness/boards/<int:board_id>/scores/add/', views.add_score, name='addScore'),
    path('activeness/boards/scores/<int:score_id>/update/', views.update_score, name='updateScore'),
    path('activeness/boards/scores/<int:score_id>/delete/', views.delete_score, name='deleteScore'),
]
