from rest_framework import serializers

from .mappers import TABLE_TYPES


class ImportUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    table_type = serializers.ChoiceField(choices=TABLE_TYPES, required=False)
