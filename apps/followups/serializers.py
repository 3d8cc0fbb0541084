from rest_framework import serializers

from .models import Followup


class FollowupSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.display_name', read_only=True, default=None)

    class Meta:
        model = Followup
        fields = [
            'id', 'issue', 'solution', 'due_date', 'is_completed', 'completed_at',
            'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]
        read_only_fields = ['completed_at', 'created_by', 'created_at', 'updated_at']
