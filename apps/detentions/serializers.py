from rest_framework import serializers

from apps.academics.models import Class
from apps.academics.serializers import HHMMTimeField
from apps.users.models import User

from .models import DetentionSlot, Detention


class DetentionSlotSerializer(serializers.ModelSerializer):
    start_time = HHMMTimeField()
    end_time = HHMMTimeField()
    classroom_name = serializers.CharField(source='classroom.name', read_only=True)
    seats_left = serializers.IntegerField(read_only=True)

    class Meta:
        model = DetentionSlot
        fields = [
            'id', 'date', 'start_time', 'end_time', 'classroom', 'classroom_name',
            'term', 'week', 'capacity', 'booked_count', 'seats_left', 'created_by',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class SlotCreateSerializer(serializers.Serializer):
    """A single ``date`` or a batch of ``dates`` sharing one window."""
    date = serializers.DateField(required=False)
    dates = serializers.ListField(child=serializers.DateField(), required=False, allow_empty=False)
    start_time = HHMMTimeField()
    end_time = HHMMTimeField()
    classroom = serializers.UUIDField()

    def validate(self, attrs):
        if ('date' in attrs) == ('dates' in attrs):
            raise serializers.ValidationError('Provide either date or dates.')
        return attrs


class SlotUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    start_time = HHMMTimeField(required=False)
    end_time = HHMMTimeField(required=False)
    classroom = serializers.UUIDField(required=False)


class SlotCoordinateSerializer(serializers.Serializer):
    term = serializers.UUIDField()
    classroom = serializers.UUIDField()
    week = serializers.IntegerField(min_value=1)
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    slot_number = serializers.IntegerField(min_value=0)
    enable = serializers.BooleanField()


class DetentionSerializer(serializers.ModelSerializer):
    class_ref = serializers.PrimaryKeyRelatedField(queryset=Class.objects.all())
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.students())
    class_name = serializers.CharField(source='class_ref.name', read_only=True)
    student_name = serializers.CharField(source='student.display_name', read_only=True)
    booked_slot = DetentionSlotSerializer(read_only=True)

    class Meta:
        model = Detention
        fields = [
            'id', 'class_ref', 'class_name', 'student', 'student_name', 'week', 'reason',
            'status', 'booked_slot', 'completion_status', 'attempts', 'assigned_by',
            'assigned_at', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'status', 'completion_status', 'attempts', 'assigned_by', 'assigned_at',
            'created_at', 'updated_at',
        ]


class BookSlotSerializer(serializers.Serializer):
    slot = serializers.UUIDField()


class ResolveSerializer(serializers.Serializer):
    completion_status = serializers.CharField()
