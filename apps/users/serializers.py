from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.cache import cache
from django.utils import timezone

import logging

User = get_user_model()
logger = logging.getLogger(__name__)

ROLE_CHOICES = ['client', 'freelancer']


class UserSerializer(serializers.ModelSerializer):
    roles = serializers.ReadOnlyField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'first_name', 'last_name', 'email', 'phone_number',
            'roles', 'bio', 'skills', 'experience_level', 'date_joined'
        ]
        read_only_fields = ['id', 'username', 'roles', 'date_joined']


class PublicUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name']
        ref_name = 'PublicUser'


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        max_length=128,
        write_only=True,
        min_length=8,
        error_messages={'min_length': 'Password must be at least 8 characters long.'}
    )
    roles = serializers.ListField(
        child=serializers.ChoiceField(choices=ROLE_CHOICES),
        allow_empty=False,
        write_only=True
    )

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone_number', 'password', 'roles']
        read_only_fields = ['id']

    def validate_email(self, value):
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already in use.")
        return value

    def validate_phone_number(self, value):
        if not value:
            return None
        if not value.startswith('+') or not value[1:].isdigit():
            raise serializers.ValidationError("Invalid phone number format.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        roles = validated_data.pop('roles')
        password = validated_data.pop('password')
        user = User(
            is_client='client' in roles,
            is_freelancer='freelancer' in roles,
            **validated_data
        )
        user.set_password(password)
        user.save()
        logger.info(f"Registered user {user.id} with roles {roles}")
        return user


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField(max_length=255, trim_whitespace=True)
    password = serializers.CharField(max_length=128, write_only=True)

    def validate(self, data):
        identifier = data.get('identifier').strip().lower()
        password = data.get('password')
        cache_key = f'login_attempts_{identifier}'
        attempts = cache.get(cache_key, 0)
        if attempts >= 5:
            logger.warning(f"Too many login attempts for {identifier}")
            raise serializers.ValidationError("Too many login attempts. Please try again in 15 minutes.")
        user = User.get_by_identifier(identifier)
        if not user or not user.check_password(password):
            logger.warning(f"Failed login for identifier: {identifier}")
            cache.set(cache_key, attempts + 1, 900)
            raise serializers.ValidationError("Incorrect email, username or password.")
        if not user.is_active:
            raise serializers.ValidationError("User account is disabled. Please contact support.")
        cache.delete(cache_key)
        data['user'] = user
        return data

    def save(self):
        user = self.validated_data['user']
        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        return user
