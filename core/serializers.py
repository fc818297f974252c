from rest_framework import serializers
from rest_framework.exceptions import ErrorDetail
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from django.contrib.auth import get_user_model

from .models import User, Milestone
from .validation import Variant, UpdateRequiresFieldsMixin, VariantErrorsMixin, validate_variant
from .validators import validate_admin_password, validate_string_list

Admin = get_user_model()


class AdminSerializer(UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, style={'input_type': 'password'})
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = Admin
        fields = ['id', 'name', 'email', 'password', 'role', 'role_display', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_email(self, value):
        value = value.strip().lower()
        queryset = Admin.objects.filter(email=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("email already exists", code='unique')
        return value

    def validate_password(self, value):
        return validate_admin_password(value, self.instance)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': ErrorDetail("Password is required", code='required')})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return Admin.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance


class AdminTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, admin):
        token = super().get_token(admin)
        token['name'] = admin.name
        token['role'] = admin.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['admin'] = AdminSerializer(self.user).data
        return data


class UserSerializer(UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    occupation_status_display = serializers.CharField(source='get_occupation_status_display', read_only=True)
    age_category_display = serializers.CharField(source='get_age_category_display', read_only=True)
    milestone_count = serializers.IntegerField(source='milestones.count', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'name', 'communities', 'roles', 'occupation_status', 'occupation_status_display',
            'age_category', 'age_category_display', 'domicile', 'created_at', 'milestone_count'
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'created_at': {'required': False},
        }

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required", code='required')
        return value

    def validate_communities(self, value):
        return validate_string_list(value, 'communities')

    def validate_roles(self, value):
        return validate_string_list(value, 'roles')


MILESTONE_DETAIL_FIELDS = {
    Milestone.PROJECT_SUBMITTED: ('title',),
    Milestone.LEVEL_UP: ('from', 'to'),
    Milestone.JOB_PLACEMENT: ('company', 'role'),
}

MILESTONE_VARIANTS = {
    tag: Variant(required=fields)
    for tag, fields in MILESTONE_DETAIL_FIELDS.items()
}


class MilestoneSerializer(VariantErrorsMixin, UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    type = serializers.ChoiceField(source='milestone_type', choices=Milestone.TYPE_CHOICES)
    type_display = serializers.CharField(source='get_milestone_type_display', read_only=True)
    user_name = serializers.CharField(source='user.name', read_only=True)

    class Meta:
        model = Milestone
        fields = ['id', 'user', 'user_name', 'type', 'type_display', 'detail', 'date']
        read_only_fields = ['id']

    def validate_detail(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Detail must be an object", code='invalid')
        return value

    def _check_detail(self, milestone_type, detail):
        try:
            validate_variant(detail, 'type', MILESTONE_VARIANTS, tag=milestone_type)
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({'detail': exc.detail})

    def check_variant(self, data):
        # Raw input: the type is sent as `type`
        if 'type' not in data and 'detail' not in data:
            return
        milestone_type = data.get('type', getattr(self.instance, 'milestone_type', None))
        detail = data.get('detail', getattr(self.instance, 'detail', None)) or {}
        if milestone_type in MILESTONE_VARIANTS and isinstance(detail, dict):
            self._check_detail(milestone_type, detail)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if 'milestone_type' not in attrs and 'detail' not in attrs:
            return attrs

        milestone_type = attrs.get('milestone_type', getattr(self.instance, 'milestone_type', None))
        detail = attrs.get('detail', getattr(self.instance, 'detail', None)) or {}
        self._check_detail(milestone_type, detail)

        # Keep only the keys that belong to the resolved variant
        attrs['detail'] = {key: detail[key] for key in MILESTONE_DETAIL_FIELDS[milestone_type]}
        return attrs
