from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'phone_number', 'is_client', 'is_freelancer', 'is_superuser')
    list_filter = ('is_client', 'is_freelancer', 'is_superuser')
    search_fields = ('username', 'email', 'phone_number')
