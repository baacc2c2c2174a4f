"""
Authentication serializers
"""
from django.contrib.auth import authenticate
from rest_framework import serializers

from apps.core.utils.constants import AGENT_SPECIALIZATIONS
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """
    User serializer for API responses.
    """
    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'name',
            'phone',
            'photo',
            'bio',
            'role',
            'agency',
            'specialization',
            'agent_status',
            'is_active',
            'email_verified',
            'created_at',
        ]
        read_only_fields = fields


class PublicAgentSerializer(serializers.ModelSerializer):
    """Agent profile as shown to anonymous visitors"""
    listing_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'phone', 'photo', 'bio', 'agency', 'specialization', 'listing_count']
        read_only_fields = fields


class SignupSerializer(serializers.ModelSerializer):
    """Serializer for user registration. New accounts always get the user role."""
    password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['email', 'name', 'phone', 'password', 'password_confirm']

    def validate_email(self, value):
        email = User.objects.normalize_email(value)
        if User.objects.filter(email=email).exists():
            raise serializers.ValidationError("An account with this email already exists")
        return email

    def validate(self, data):
        if data['password'] != data['password_confirm']:
            raise serializers.ValidationError({'password_confirm': "Passwords do not match"})
        return data

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    """Serializer for user login"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, data):
        user = authenticate(
            request=self.context.get('request'),
            email=User.objects.normalize_email(data['email']),
            password=data['password'],
        )
        data['user'] = user
        return data


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for updating the caller's own profile. Role and agent
    fields are not writable here.
    """
    class Meta:
        model = User
        fields = ['name', 'phone', 'photo', 'bio']


class ChangePasswordSerializer(serializers.Serializer):
    """Serializer for password change"""
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=8)
    new_password_confirm = serializers.CharField(write_only=True)

    def validate(self, data):
        if data['new_password'] != data['new_password_confirm']:
            raise serializers.ValidationError({'new_password_confirm': "New passwords do not match"})
        return data


class AgentApplicationSerializer(serializers.Serializer):
    """A regular user's request to become an agent"""
    agency = serializers.CharField(max_length=150)
    specialization = serializers.ChoiceField(choices=AGENT_SPECIALIZATIONS, required=False)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)


class AgentApplicationDecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=['approve', 'reject'])
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class AuthTokenResponseSerializer(serializers.Serializer):
    """Response serializer for signup/login"""
    token = serializers.CharField()
    user = UserSerializer()
