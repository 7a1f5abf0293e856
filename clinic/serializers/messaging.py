from rest_framework import serializers


class MessageSendSerializer(serializers.Serializer):
    recipientId = serializers.IntegerField()
    content = serializers.CharField(allow_blank=True, trim_whitespace=False, max_length=4000)


class PeerSerializer(serializers.Serializer):
    peer = serializers.IntegerField()
