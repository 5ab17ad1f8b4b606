from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views import RegisterView, ProfileView, EligibilityView, UserListView, ToggleUserStatusView

urlpatterns = [
    # Auth
    path('auth/register/', RegisterView.as_view(), name='auth-register'),
    path('auth/login/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Users
    path('users/profile/', ProfileView.as_view(), name='user-profile'),
    path('users/eligibility/', EligibilityView.as_view(), name='user-eligibility'),
    path('users/all/', UserListView.as_view(), name='user-list'),
    path('users/<int:pk>/toggle-status/', ToggleUserStatusView.as_view(), name='user-toggle-status'),
]
