from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Restaurant, RevokedToken, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ['username', 'role', 'restaurant', 'created_by', 'is_active']
    list_filter = ['role', 'is_active']
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Restaurant', {'fields': ('role', 'restaurant', 'created_by')}),
    )
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ('Restaurant', {'fields': ('role', 'restaurant')}),
    )


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ['name', 'location', 'owner', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'location']


@admin.register(RevokedToken)
class RevokedTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'revoked_at', 'expires_at']
    readonly_fields = ['token_hash', 'user', 'revoked_at', 'expires_at']
