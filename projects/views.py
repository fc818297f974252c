from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
import logging

from core.permissions import IsAdminOrReadOnly
from .models import Project, Media
from .serializers import ProjectSerializer, MediaSerializer
from .filters import ProjectFilter, MediaFilter

logger = logging.getLogger(__name__)


class ProjectViewSet(viewsets.ModelViewSet):
    """
    Foundation projects with their media gallery and finance report.
    Anonymous visitors only see projects that are no longer drafts.
    """
    queryset = Project.objects.select_related('created_by', 'finance').prefetch_related('gallery')
    serializer_class = ProjectSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ProjectFilter
    search_fields = ['title', 'description']
    ordering_fields = ['start_date', 'title', 'created_at']

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_authenticated:
            queryset = queryset.exclude(status=Project.STATUS_DRAFT)
        return queryset

    def perform_create(self, serializer):
        project = serializer.save(created_by=self.request.user)
        logger.info(f"Project {project.pk} created by {self.request.user.email}")

    def perform_update(self, serializer):
        serializer.save(updated_by=self.request.user)


class MediaViewSet(viewsets.ModelViewSet):
    queryset = Media.objects.select_related('project', 'uploaded_by')
    serializer_class = MediaSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = MediaFilter
    ordering_fields = ['created_at']

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_authenticated:
            queryset = queryset.exclude(project__status=Project.STATUS_DRAFT)
        return queryset

    def perform_create(self, serializer):
        serializer.save(uploaded_by=self.request.user)
