from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView
from .views import AdminTokenObtainPairView, CurrentAdminView, AdminViewSet, UserViewSet, MilestoneViewSet

router = DefaultRouter()
router.register(r'admins', AdminViewSet, basename='admin')
router.register(r'users', UserViewSet, basename='user')
router.register(r'milestones', MilestoneViewSet, basename='milestone')

urlpatterns = [
    path('auth/login/', AdminTokenObtainPairView.as_view(), name='jwt-create'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='jwt-refresh'),
    path('auth/verify/', TokenVerifyView.as_view(), name='jwt-verify'),
    path('auth/me/', CurrentAdminView.as_view(), name='current-admin'),
    path('', include(router.urls)),
]
