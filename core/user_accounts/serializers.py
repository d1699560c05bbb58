from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import CustomUser, UserRole


class UserListSerializer(serializers.ModelSerializer):
    """Read-only view of a user"""
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = CustomUser
        fields = ['id', 'email', 'name', 'phone_number', 'role', 'role_display', 'is_active', 'date_joined']
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    """Nested reference used inside procurement documents"""

    class Meta:
        model = CustomUser
        fields = ['id', 'name', 'email', 'role']
        read_only_fields = fields


class AdminUserCreationSerializer(serializers.ModelSerializer):
    """Admin creates users with any role"""
    password = serializers.CharField(write_only=True, required=True, style={'input_type': 'password'})
    role = serializers.ChoiceField(choices=UserRole.choices)

    class Meta:
        model = CustomUser
        fields = ['email', 'name', 'phone_number', 'role', 'password']

    def validate_email(self, value):
        if CustomUser.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return CustomUser.objects.create_user(**validated_data)


class AdminUserUpdateSerializer(serializers.ModelSerializer):
    """Email and password are not editable here"""
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)

    class Meta:
        model = CustomUser
        fields = ['name', 'phone_number', 'role', 'is_active']
