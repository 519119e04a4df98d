from django.db import models
from django.contrib.auth.models import AbstractUser

from core.constants import EXPERIENCE_LEVEL_CHOICES


class User(AbstractUser):
    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=16, blank=True, null=True, unique=True)
    is_client = models.BooleanField(default=False)
    is_freelancer = models.BooleanField(default=False)
    bio = models.TextField(max_length=1000, blank=True)
    skills = models.JSONField(default=list, blank=True)
    experience_level = models.CharField(max_length=20, choices=EXPERIENCE_LEVEL_CHOICES, default='entry')

    @property
    def roles(self):
        roles = []
        if self.is_client:
            roles.append('client')
        if self.is_freelancer:
            roles.append('freelancer')
        if self.is_superuser:
            roles.append('admin')
        return roles

    @staticmethod
    def get_by_identifier(identifier):
        return User.objects.filter(
            models.Q(email__iexact=identifier) | models.Q(username__iexact=identifier)
        ).first()

    def __str__(self):
        return self.username
