from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import Admin, User, Milestone


@admin.register(Admin)
class FoundationAdminAdmin(UserAdmin):
    list_display = ('name', 'email', 'role', 'is_active', 'last_login')
    list_filter = ('role', 'is_active')
    search_fields = ('name', 'email')
    ordering = ('name',)
    readonly_fields = ('created_at', 'updated_at', 'last_login')

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal Info', {'fields': ('name',)}),
        ('Permissions', {
            'fields': (
                'role',
                'is_active',
                'is_staff',
                'is_superuser',
                'groups',
                'user_permissions',
            )
        }),
        ('Important dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'password1', 'password2'),
        }),
    )


@admin.register(User)
class CommunityUserAdmin(admin.ModelAdmin):
    list_display = ('name', 'occupation_status', 'age_category', 'domicile', 'created_at')
    list_filter = ('occupation_status', 'age_category')
    search_fields = ('name', 'domicile')


@admin.register(Milestone)
class MilestoneAdmin(admin.ModelAdmin):
    list_display = ('user', 'milestone_type', 'date')
    list_filter = ('milestone_type',)
    raw_id_fields = ('user',)
