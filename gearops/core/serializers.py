from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Setting, ActivityLog
from .permissions import ROLE_GROUPS, STAFF, assign_role


class UserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role',
                  'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_superuser', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=list(ROLE_GROUPS), write_only=True, required=False)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone', 'role']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        role = validated_data.pop('role', STAFF)
        user = User.objects.create(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        assign_role(user, role)
        return user


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class ActivityLogSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = ActivityLog
        fields = ['id', 'user', 'user_name', 'action', 'entity_type', 'entity_id',
                  'details', 'ip_address', 'created_at']
