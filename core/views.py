from rest_framework import viewsets, permissions, filters, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, OpenApiExample
from django.contrib.auth import get_user_model
import logging

from .models import User, Milestone
from .serializers import AdminSerializer, AdminTokenObtainPairSerializer, UserSerializer, MilestoneSerializer
from .filters import UserFilter, MilestoneFilter
from .permissions import IsAdmin, IsSelfOrSuperAdmin

logger = logging.getLogger(__name__)
Admin = get_user_model()


class AdminTokenObtainPairView(TokenObtainPairView):
    serializer_class = AdminTokenObtainPairSerializer

    @extend_schema(
        summary="Log in as an admin",
        examples=[
            OpenApiExample('Login', value={"email": "admin@foundation.org", "password": "secret123"}, request_only=True),
        ]
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)


class CurrentAdminView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(responses={200: AdminSerializer}, summary="The admin owning the access token")
    def get(self, request):
        return Response(AdminSerializer(request.user).data)


class AdminViewSet(viewsets.ModelViewSet):
    """
    Foundation admin accounts.

    The first admin can be created without authentication (bootstrap);
    after that only super admins create admins, change roles or delete
    other admins.
    """
    queryset = Admin.objects.all()
    serializer_class = AdminSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['role', 'is_active']
    search_fields = ['name', 'email']
    ordering_fields = ['name', 'created_at']

    def get_permissions(self):
        if self.action == 'create' and not Admin.objects.exists():
            return [permissions.AllowAny()]
        return [IsAdmin(), IsSelfOrSuperAdmin()]

    def perform_create(self, serializer):
        user = self.request.user
        if Admin.objects.exists() and not getattr(user, 'is_super_admin', False):
            raise PermissionDenied("Only a super admin can create admins.")
        if not Admin.objects.exists():
            # The bootstrap account administers everyone else
            admin = serializer.save(role=Admin.ROLE_SUPER_ADMIN)
        else:
            admin = serializer.save()
        logger.info(f"Admin {admin.email} created with role {admin.role}")

    def perform_update(self, serializer):
        if 'role' in serializer.validated_data and not self.request.user.is_super_admin:
            if serializer.validated_data['role'] != serializer.instance.role:
                raise PermissionDenied("Only a super admin can change roles.")
        serializer.save()

    def perform_destroy(self, instance):
        user = self.request.user
        if instance.pk != user.pk and not user.is_super_admin:
            raise PermissionDenied("Only a super admin can delete other admins.")
        logger.info(f"Admin {instance.email} deleted by {user.email}")
        instance.delete()


class UserViewSet(viewsets.ModelViewSet):
    """Community members. Admin only."""
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = UserFilter
    search_fields = ['name', 'domicile']
    ordering_fields = ['name', 'created_at']


class MilestoneViewSet(viewsets.ModelViewSet):
    queryset = Milestone.objects.select_related('user')
    serializer_class = MilestoneSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = MilestoneFilter
    ordering_fields = ['date']

    @extend_schema(
        examples=[
            OpenApiExample('Level up', value={"user": 1, "type": "level_up", "detail": {"from": "Beginner", "to": "Intermediate"}, "date": "2025-02-01"}, request_only=True),
            OpenApiExample('Job placement', value={"user": 1, "type": "job_placement", "detail": {"company": "Acme", "role": "Designer"}, "date": "2025-03-15"}, request_only=True),
        ]
    )
    def create(self, request, *args, **kwargs):
        return super().create(request, *args, **kwargs)
