from django.contrib import admin
from .models import Project, Media


class MediaInline(admin.TabularInline):
    model = Media
    extra = 0
    raw_id_fields = ('uploaded_by',)


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('title', 'category', 'status', 'start_date', 'end_date', 'created_by')
    list_filter = ('status', 'category')
    search_fields = ('title', 'description')
    raw_id_fields = ('created_by', 'updated_by')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [MediaInline]


@admin.register(Media)
class MediaAdmin(admin.ModelAdmin):
    list_display = ('project', 'media_type', 'url', 'uploaded_by', 'created_at')
    list_filter = ('media_type',)
    raw_id_fields = ('project', 'uploaded_by')
