"""
Authentication URL Configuration
"""
from django.urls import path
from . import views

urlpatterns = [
    path('signup/', views.signup, name='signup'),
    path('login/', views.login, name='login'),
    path('me/', views.me, name='current-user'),
    path('update-password/', views.update_password, name='update-password'),
    path('agent-application/', views.apply_agent, name='agent-application'),
    path('users/', views.list_users, name='user-list'),
    path('users/<uuid:user_id>/agent-application/', views.review_agent_application, name='agent-application-review'),
    path('agents/', views.list_agents, name='agent-list'),
    path('agents/<uuid:agent_id>/', views.get_agent, name='agent-detail'),
]
