"""
Custom User model for task_timeouts.

CRITICAL: This file must be created and AUTH_USER_MODEL set before running
any migrations. Changing the User model after migrations is very complex.

Users authenticate elsewhere (OTP or password); this project only needs
their role, display handle and push destination.
"""

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    """
    Custom user manager where email is the unique identifier
    for authentication instead of username.
    """

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular user with the given email and password."""
        if not email:
            raise ValueError('The Email field must be set')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create and save a SuperUser with the given email and password."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.SUPER_ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(email, password, **extra_fields)

    def with_push_destination(self):
        """Active users that can receive push notifications."""
        return self.filter(is_active=True).exclude(fcm_token__isnull=True).exclude(fcm_token='')


class User(AbstractUser):
    """
    Custom User model with email authentication and role-based access.

    Roles:
    - Super Admin: Full access, can trigger timeout checks
    - Admin: Manages tasks, can trigger timeout checks
    - User: Works on assigned tasks, receives timeout notifications
    """

    class Role(models.TextChoices):
        SUPER_ADMIN = 'super_admin', 'Super Admin'
        ADMIN = 'admin', 'Admin'
        USER = 'user', 'User'

    # Remove username field, use email instead
    username = None
    email = models.EmailField(
        'email address',
        unique=True,
        error_messages={
            'unique': 'A user with that email already exists.',
        },
    )
    user_name = models.CharField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        help_text='Short handle shown in notifications',
    )
    phone_number = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
    )

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        db_index=True,
    )

    # Push destination (Firebase Cloud Messaging registration token)
    fcm_token = models.TextField(
        null=True,
        blank=True,
        help_text='Device token used for push notifications',
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = 'user'
        verbose_name_plural = 'users'
        ordering = ['first_name', 'last_name']
        indexes = [
            models.Index(fields=['role'], name='accounts_user_role_idx'),
            models.Index(fields=['is_active'], name='accounts_user_active_idx'),
        ]

    def __str__(self):
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self):
        """Return the first_name plus the last_name, with a space in between."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        """Return the short name for the user."""
        return self.user_name or self.first_name or self.email.split('@')[0]

    @property
    def has_push_destination(self):
        return bool(self.is_active and self.fcm_token and self.fcm_token.strip())

    # ==========================================================================
    # Role Permission Methods
    # ==========================================================================

    def is_super_admin(self):
        """Check if user is a Super Admin."""
        return self.role == self.Role.SUPER_ADMIN

    def is_admin(self):
        """Check if user is an Admin or Super Admin."""
        return self.role in [self.Role.SUPER_ADMIN, self.Role.ADMIN]

    def can_trigger_timeout_check(self):
        """Check if user can run the timeout check on demand."""
        return self.is_admin() or self.is_superuser
