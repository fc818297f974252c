from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ProjectViewSet, MediaViewSet

router = DefaultRouter()
router.register(r'projects', ProjectViewSet, basename='project')
router.register(r'media', MediaViewSet, basename='media')

urlpatterns = [
    path('', include(router.urls)),
]
