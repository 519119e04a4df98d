from django.urls import path
from .views import AuthLoginView, AuthRegisterView, UserProfileView

urlpatterns = [
    # Authentication
    path('auth/register/', AuthRegisterView.as_view(), name='auth_register'),
    path('auth/login/', AuthLoginView.as_view(), name='auth_login'),

    # Profile
    path('me/', UserProfileView.as_view(), name='user_profile'),
]
