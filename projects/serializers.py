from rest_framework import serializers
from core.validation import UpdateRequiresFieldsMixin
from .models import Project, Media


class MediaSerializer(UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    type = serializers.ChoiceField(source='media_type', choices=Media.TYPE_CHOICES)
    uploaded_by_name = serializers.CharField(source='uploaded_by.name', read_only=True)

    class Meta:
        model = Media
        fields = ['id', 'project', 'type', 'url', 'caption', 'uploaded_by', 'uploaded_by_name', 'created_at', 'updated_at']
        read_only_fields = ['id', 'uploaded_by', 'created_at', 'updated_at']
        extra_kwargs = {
            'caption': {'max_length': 500},
        }


class ProjectFinanceSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    income = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    expenses = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)


class ProjectSerializer(UpdateRequiresFieldsMixin, serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True)
    gallery = MediaSerializer(many=True, read_only=True)
    finance = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = [
            'id', 'title', 'description', 'category', 'start_date', 'end_date', 'status', 'status_display',
            'created_by', 'created_by_name', 'updated_by', 'gallery', 'finance', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_by', 'updated_by', 'created_at', 'updated_at']
        extra_kwargs = {
            'title': {'max_length': 200},
        }

    def get_finance(self, obj):
        finance = getattr(obj, 'finance', None)
        if finance is None:
            return None
        return ProjectFinanceSerializer(finance).data

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title is required", code='required')
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': "End date must be after start date"}, code='invalid')
        return attrs
