import bleach
from rest_framework import serializers

from clinic.models import InventoryItem


class InventoryItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, error_messages={'blank': 'Name is required',
                                                                 'required': 'Name is required'})
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    stock = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, default=0)
    low_stock_threshold = serializers.IntegerField(required=False, min_value=0, default=10)
    doses_per_vial = serializers.IntegerField(required=False, min_value=1, default=1)
    expiration_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=[InventoryItem.STATUS_ACTIVE, InventoryItem.STATUS_INACTIVE],
        required=False, default=InventoryItem.STATUS_ACTIVE,
    )

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_description(self, v):
        return bleach.clean(v.strip(), strip=True) if v else v


class SettleSerializer(serializers.Serializer):
    itemId = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DoseBatchSerializer(serializers.Serializer):
    itemId = serializers.CharField()
    appointmentId = serializers.UUIDField(required=False, allow_null=True)
    startDose = serializers.IntegerField(min_value=1, max_value=3)
    numDoses = serializers.IntegerField(min_value=1, max_value=3)
