import bleach
from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        identifier = (attrs.get('email') or attrs.get('username') or '').strip()
        if not identifier:
            raise serializers.ValidationError({'email': ['Email is required']})
        attrs['identifier'] = identifier
        return attrs


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, trim_whitespace=False)
    fullName = serializers.CharField(max_length=255)
    contactNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address = serializers.CharField(required=False, allow_blank=True)
    birthday = serializers.DateField(required=False, allow_null=True)
    sex = serializers.ChoiceField(choices=['Male', 'Female', 'Other'], required=False, allow_blank=True)

    def validate_fullName(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Full name is required')
        return v

    def validate_address(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class PasswordForgotSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetSerializer(serializers.Serializer):
    uid = serializers.CharField()
    token = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)


class PasswordChangeSerializer(serializers.Serializer):
    password = serializers.CharField(trim_whitespace=False)
