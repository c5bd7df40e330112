import hashlib

from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models
from django.utils import timezone


class UserManager(DjangoUserManager):
    def create_owner(self, username, password=None, **extra_fields):
        extra_fields['role'] = User.OWNER
        extra_fields.pop('restaurant', None)
        return self.create_user(username, password=password, **extra_fields)

    def create_manager(self, username, password, restaurant, created_by=None, **extra_fields):
        if restaurant is None:
            raise ValueError('A manager must belong to a restaurant')
        if created_by is not None and created_by.role != User.OWNER:
            raise ValueError('Only an owner can create a manager')
        extra_fields.update(role=User.MANAGER, restaurant=restaurant, created_by=created_by)
        return self.create_user(username, password=password, **extra_fields)

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', User.OWNER)
        return super().create_superuser(username, email=email, password=password, **extra_fields)


class TimeStampedModel(models.Model):
    """Base model with created_at and updated_at fields"""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# =============== USER MANAGEMENT ===============

class User(AbstractUser):
    """Owner or manager account. A manager always works for exactly one restaurant."""
    OWNER = 'owner'
    MANAGER = 'manager'
    ROLE_CHOICES = [
        (OWNER, 'Owner'),
        (MANAGER, 'Manager'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES)
    restaurant = models.ForeignKey(
        'Restaurant', on_delete=models.CASCADE, null=True, blank=True, related_name='managers'
    )
    created_by = models.ForeignKey(
        'self', on_delete=models.SET_NULL, null=True, blank=True, related_name='created_managers'
    )

    objects = UserManager()

    class Meta:
        db_table = 'users'
        constraints = [
            models.CheckConstraint(
                condition=models.Q(role__in=['owner', 'manager']),
                name='users_role_valid',
            ),
            models.CheckConstraint(
                condition=models.Q(role='owner') | models.Q(restaurant__isnull=False),
                name='users_manager_has_restaurant',
            ),
        ]

    def __str__(self):
        return f"{self.username} ({self.role})"

    @property
    def is_owner(self):
        return self.role == self.OWNER

    @property
    def is_manager(self):
        return self.role == self.MANAGER


# =============== RESTAURANTS ===============

class Restaurant(TimeStampedModel):
    """A tenant: owns its products, stock and orders"""
    ACTIVE = 'active'
    CLOSED = 'closed'
    STATUS_CHOICES = [
        (ACTIVE, 'Active'),
        (CLOSED, 'Closed'),
    ]

    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255)
    owner = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='restaurants',
        limit_choices_to={'role': User.OWNER},
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=ACTIVE)

    class Meta:
        db_table = 'restaurants'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.location})"


# =============== TOKEN REVOCATION ===============

class RevokedToken(models.Model):
    """Access tokens invalidated by logout, kept until they would have expired anyway"""
    token_hash = models.CharField(max_length=64, unique=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='revoked_tokens')
    expires_at = models.DateTimeField(db_index=True)
    revoked_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'revoked_tokens'

    @staticmethod
    def hash_token(raw_token):
        if isinstance(raw_token, bytes):
            raw_token = raw_token.decode()
        return hashlib.sha256(raw_token.encode()).hexdigest()

    @classmethod
    def is_revoked(cls, raw_token):
        return cls.objects.filter(
            token_hash=cls.hash_token(raw_token),
            expires_at__gt=timezone.now(),
        ).exists()

    @classmethod
    def purge_expired(cls):
        deleted, _ = cls.objects.filter(expires_at__lte=timezone.now()).delete()
        return deleted
