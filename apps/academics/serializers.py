from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from apps.core.timeutils import format_hhmm, parse_hhmm
from apps.curriculum.models import ClassTest
from apps.users.models import User

from .models import (
    AttendanceRecord, Class, ClassScheduleEntry, Classroom, ClassTestMark, ClassWeek, Enrollment,
    HomeworkGrade, Term,
)


class HHMMTimeField(serializers.Field):
    """Clock time exchanged as an "HH:MM" string."""

    default_error_messages = {
        'invalid': 'Time must be given as HH:MM.',
    }

    def to_representation(self, value):
        return format_hhmm(value)

    def to_internal_value(self, data):
        try:
            return parse_hhmm(data)
        except DjangoValidationError:
            self.fail('invalid')


class TermSerializer(serializers.ModelSerializer):
    end_date = serializers.DateField(read_only=True)

    class Meta:
        model = Term
        fields = [
            'id', 'name', 'term_type', 'start_date', 'end_date', 'weeks',
            'is_first_term_of_year', 'is_current', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = ['is_current', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {'weeks': {'required': False}}

    def validate_start_date(self, value):
        if value.weekday() != Term.START_WEEKDAY:
            raise serializers.ValidationError(_('Terms must start on a Saturday.'), code='start_not_saturday')
        return value


class ClassroomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Classroom
        fields = ['id', 'name', 'capacity', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ScheduleEntrySerializer(serializers.ModelSerializer):
    start_time = HHMMTimeField()

    class Meta:
        model = ClassScheduleEntry
        fields = ['day_of_week', 'start_time', 'duration_minutes']


class EnrollmentSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.display_name', read_only=True)

    class Meta:
        model = Enrollment
        fields = ['student', 'student_name', 'joined_week', 'school_test_results']


class ClassSerializer(serializers.ModelSerializer):
    """
    Read/write representation of a class. Writes go through ``ClassService``
    in the viewset, so ``create``/``update`` are never called on this serializer.
    """
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    schedule = ScheduleEntrySerializer(many=True, source='schedule_entries')
    teacher = serializers.PrimaryKeyRelatedField(queryset=User.objects.teachers())
    students = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.students(), many=True, required=False
    )
    teacher_name = serializers.CharField(source='teacher.display_name', read_only=True)
    classroom_name = serializers.CharField(source='classroom.name', read_only=True)
    term_name = serializers.CharField(source='term.name', read_only=True)
    enrollments = EnrollmentSerializer(many=True, read_only=True)

    class Meta:
        model = Class
        fields = [
            'id', 'name', 'year', 'teacher', 'teacher_name', 'classroom', 'classroom_name',
            'term', 'term_name', 'progress', 'schedule', 'students', 'enrollments', 'copy_to_next_term', 'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class ConflictCheckSerializer(serializers.Serializer):
    classroom = serializers.UUIDField()
    term = serializers.UUIDField()
    exclude_class = serializers.UUIDField(required=False, allow_null=True)
    schedule = ScheduleEntrySerializer(many=True, allow_empty=False)


class CopyClassSerializer(serializers.Serializer):
    term = serializers.UUIDField()


class StudentMembershipSerializer(serializers.Serializer):
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.students())
    joined_week = serializers.IntegerField(min_value=1, required=False)
    school_test_results = serializers.CharField(max_length=255, required=False, allow_blank=True)


class AttendanceEntrySerializer(serializers.Serializer):
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.students())
    status = serializers.ChoiceField(choices=AttendanceRecord.Status.choices)


class AttendanceSerializer(serializers.Serializer):
    week = serializers.IntegerField(min_value=1)
    records = AttendanceEntrySerializer(many=True)


class HomeworkEntrySerializer(serializers.Serializer):
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.students())
    grade = serializers.ChoiceField(choices=HomeworkGrade.Grade.choices)
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class HomeworkSerializer(serializers.Serializer):
    week = serializers.IntegerField(min_value=1)
    grades = HomeworkEntrySerializer(many=True)


class MarkEntrySerializer(serializers.Serializer):
    student = serializers.PrimaryKeyRelatedField(queryset=User.objects.students())
    mark = serializers.DecimalField(max_digits=6, decimal_places=2, min_value=0)


class MarksSerializer(serializers.Serializer):
    week = serializers.IntegerField(min_value=1)
    test = serializers.PrimaryKeyRelatedField(queryset=ClassTest.objects.all(), allow_null=True, required=False)
    marks = MarkEntrySerializer(many=True)


class AttendanceRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttendanceRecord
        fields = ['student', 'status']


class HomeworkGradeSerializer(serializers.ModelSerializer):
    class Meta:
        model = HomeworkGrade
        fields = ['student', 'grade', 'comments']


class ClassTestMarkSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClassTestMark
        fields = ['student', 'mark']


class ClassWeekSerializer(serializers.ModelSerializer):
    test_name = serializers.CharField(source='test.name', read_only=True, default=None)
    attendance = AttendanceRecordSerializer(many=True, read_only=True)
    homework = HomeworkGradeSerializer(many=True, read_only=True)
    test_marks = ClassTestMarkSerializer(many=True, read_only=True)

    class Meta:
        model = ClassWeek
        fields = ['id', 'week', 'test', 'test_name', 'attendance', 'homework', 'test_marks']
