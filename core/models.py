import json

from django.db import models
from django.db.models import Q
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import MinLengthValidator
from django.utils import timezone


class AdminManager(BaseUserManager):
    def create_user(self, email, name, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        if not name:
            raise ValueError('Name is required')

        admin = self.model(
            email=self.normalize_email(email).lower(),
            name=name,
            **extra_fields
        )
        admin.set_password(password)
        admin.save(using=self._db)
        return admin

    def create_superuser(self, email, name, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', Admin.ROLE_SUPER_ADMIN)

        return self.create_user(email, name, password, **extra_fields)


class Admin(AbstractBaseUser, PermissionsMixin):
    """Foundation staff account. The only kind of account that can log in."""
    ROLE_ADMIN = 'admin'
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_CHOICES = (
        (ROLE_ADMIN, 'Admin'),
        (ROLE_SUPER_ADMIN, 'Super Admin'),
    )

    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ADMIN)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AdminManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.email})"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_super_admin(self):
        return self.role == self.ROLE_SUPER_ADMIN or self.is_superuser

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name.split(' ')[0]


class UserQuerySet(models.QuerySet):
    def in_community(self, community):
        """
        Members whose communities list holds exactly `community`.

        The JSON text is narrowed in the database on both the raw and the
        ASCII-escaped spelling of the quoted name (SQLite stores non-ASCII
        characters as \\uXXXX), then each candidate is matched exactly.
        """
        candidates = self.filter(
            Q(communities__icontains=f'"{community}"') | Q(communities__icontains=json.dumps(community))
        )
        return self.filter(pk__in=[u.pk for u in candidates if u.belongs_to(community)])


class User(models.Model):
    """A community member taking part in the foundation's programs."""
    OCCUPATION_CHOICES = (
        ('Pelajar', 'Pelajar'),
        ('Mahasiswa', 'Mahasiswa'),
        ('Pekerja', 'Pekerja'),
        ('Wirausaha', 'Wirausaha'),
        ('Lainnya', 'Lainnya'),
    )

    AGE_CATEGORY_CHOICES = (
        ('<18', 'Under 18'),
        ('18-25', '18-25'),
        ('26-35', '26-35'),
        ('36-45', '36-45'),
        ('>45', 'Over 45'),
    )

    name = models.CharField(max_length=150)
    communities = models.JSONField(default=list, blank=True)
    roles = models.JSONField(default=list, blank=True)
    occupation_status = models.CharField(max_length=20, choices=OCCUPATION_CHOICES, blank=True)
    age_category = models.CharField(max_length=10, choices=AGE_CATEGORY_CHOICES, blank=True)
    domicile = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    objects = UserQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def belongs_to(self, community):
        return community in (self.communities or [])


class Milestone(models.Model):
    PROJECT_SUBMITTED = 'project_submitted'
    LEVEL_UP = 'level_up'
    JOB_PLACEMENT = 'job_placement'
    TYPE_CHOICES = (
        (PROJECT_SUBMITTED, 'Project Submitted'),
        (LEVEL_UP, 'Level Up'),
        (JOB_PLACEMENT, 'Job Placement'),
    )

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='milestones')
    milestone_type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    # Shape depends on milestone_type, see core.serializers.MILESTONE_VARIANTS
    detail = models.JSONField(default=dict)
    date = models.DateField()

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"{self.get_milestone_type_display()} - {self.user}"
