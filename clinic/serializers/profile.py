import bleach
from rest_framework import serializers


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class ProfileUpdateSerializer(serializers.Serializer):
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    address = serializers.CharField(required=False, allow_blank=True)
    birthday = serializers.DateField(required=False, allow_null=True)
    contact_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    sex = serializers.ChoiceField(choices=['Male', 'Female', 'Other'], required=False, allow_blank=True)
    email = serializers.EmailField(required=False)

    def validate_full_name(self, v):
        return _clean(v)

    def validate_address(self, v):
        return _clean(v)

    def validate_contact_number(self, v):
        return _clean(v)


class AvatarUploadSerializer(serializers.Serializer):
    avatar = serializers.FileField()
