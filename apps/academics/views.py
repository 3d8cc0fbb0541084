# apps/academics/views.py

import logging

from django.db.models import Q
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.exceptions import NotFound
from apps.core.permissions import IsAdmin, IsAdminOrReadOnly, IsStaffMember

from .models import Term, Classroom, Class, ClassWeek
from .serializers import (
    TermSerializer, ClassroomSerializer, ClassSerializer,
    ConflictCheckSerializer, CopyClassSerializer, StudentMembershipSerializer,
    AttendanceSerializer, HomeworkSerializer, MarksSerializer, ClassWeekSerializer,
)
from .services import ScheduleConflictChecker, ClassService, TermClock

logger = logging.getLogger(__name__)


class TermViewSet(viewsets.ModelViewSet):
    """
    Terms, the current term and week, and activation.
    """
    queryset = Term.objects.all()
    serializer_class = TermSerializer
    permission_classes = [IsAdminOrReadOnly]

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        TermClock.delete_term(kwargs['pk'], actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def current(self, request):
        term = TermClock.current_term()
        if term is None:
            raise NotFound('No current term')
        return Response(self.get_serializer(term).data)

    @action(detail=False, methods=['get'], url_path='current-week')
    def current_week(self, request):
        info = TermClock.week_info()
        term = info['term']
        return Response({
            'status': info['status'],
            'week': info['week'],
            'term': self.get_serializer(term).data if term is not None else None,
            'date': timezone.localdate(),
        })

    @action(detail=True, methods=['post'], permission_classes=[IsAdmin])
    def activate(self, request, pk=None):
        result = TermClock.activate(pk, initiated_by=request.user)
        return Response({
            'term': self.get_serializer(result.term).data,
            'rollover': result.rollover.as_dict() if result.rollover else None,
        })


class ClassroomViewSet(viewsets.ModelViewSet):
    queryset = Classroom.objects.all()
    serializer_class = ClassroomSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = super().get_queryset()
        active = self.request.query_params.get('active')
        if active is not None:
            queryset = queryset.filter(is_active=active.lower() in ('1', 'true', 'yes'))
        return queryset


class ClassViewSet(viewsets.ModelViewSet):
    """
    Timetabled classes. Creation and updates are conflict-checked.
    """
    serializer_class = ClassSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = Class.objects.select_related(
            'teacher', 'classroom', 'term'
        ).prefetch_related('students', 'schedule_entries', 'enrollments__student')

        if self.action != 'list':
            return queryset

        params = self.request.query_params
        search = params.get('search')
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(year__icontains=search))

        term = params.get('term')
        if term:
            queryset = queryset.filter(term_id=term)
        else:
            current = TermClock.current_term()
            if current is not None:
                queryset = queryset.filter(term=current)

        for param, lookup in (('teacher', 'teacher_id'), ('classroom', 'classroom_id'), ('year', 'year')):
            value = params.get(param)
            if value:
                queryset = queryset.filter(**{lookup: value})
        return queryset

    @staticmethod
    def _service_kwargs(data):
        kwargs = dict(data)
        if 'schedule_entries' in kwargs:
            kwargs['schedule'] = kwargs.pop('schedule_entries')
        return kwargs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        klass = ClassService.create_class(actor=request.user, **self._service_kwargs(serializer.validated_data))
        return Response(self.get_serializer(klass).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        klass = ClassService.update_class(instance.pk, actor=request.user, **self._service_kwargs(serializer.validated_data))
        return Response(self.get_serializer(self.get_queryset().get(pk=klass.pk)).data)

    @action(detail=False, methods=['get'])
    def today(self, request):
        classes = ClassService.todays_classes()
        return Response(self.get_serializer(classes, many=True).data)

    @action(detail=False, methods=['post'], url_path='check-conflict')
    def check_conflict(self, request):
        serializer = ConflictCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = ScheduleConflictChecker.check_conflict(
            data['schedule'], data['classroom'], data['term'], data.get('exclude_class'),
        )
        return Response({
            'conflict': result.conflict,
            'conflicting_class_name': result.conflicting_class_name,
        })

    @action(detail=True, methods=['post'], permission_classes=[IsAdmin])
    def copy(self, request, pk=None):
        serializer = CopyClassSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        klass = ClassService.copy_to_next_term(pk, serializer.validated_data['term'], actor=request.user)
        return Response(self.get_serializer(klass).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post', 'patch', 'delete'], permission_classes=[IsAdmin])
    def students(self, request, pk=None):
        serializer = StudentMembershipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        student = data['student']
        if request.method == 'DELETE':
            ClassService.remove_student(pk, student)
        elif request.method == 'PATCH':
            ClassService.update_enrollment(
                pk, student,
                joined_week=data.get('joined_week'),
                school_test_results=data.get('school_test_results'),
            )
        else:
            ClassService.add_student(
                pk, student,
                joined_week=data.get('joined_week', 1),
                school_test_results=data.get('school_test_results', ''),
            )
        return Response(self.get_serializer(self.get_queryset().get(pk=pk)).data)

    @action(detail=True, methods=['get'])
    def weeks(self, request, pk=None):
        weeks = ClassService.weekly_records(pk)
        return Response(ClassWeekSerializer(weeks, many=True).data)

    @staticmethod
    def _week_response(class_week):
        class_week = (
            ClassWeek.objects.select_related('test')
            .prefetch_related('attendance', 'homework', 'test_marks')
            .get(pk=class_week.pk)
        )
        return Response(ClassWeekSerializer(class_week).data)

    @action(detail=True, methods=['post'], permission_classes=[IsStaffMember])
    def attendance(self, request, pk=None):
        serializer = AttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        class_week = ClassService.mark_attendance(pk, data['week'], data['records'], actor=request.user)
        return self._week_response(class_week)

    @action(detail=True, methods=['post'], permission_classes=[IsStaffMember])
    def homework(self, request, pk=None):
        serializer = HomeworkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        class_week = ClassService.grade_homework(pk, data['week'], data['grades'], actor=request.user)
        return self._week_response(class_week)

    @action(detail=True, methods=['post'], url_path='test-marks', permission_classes=[IsStaffMember])
    def test_marks(self, request, pk=None):
        serializer = MarksSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        class_week = ClassService.enter_test_marks(
            pk, data['week'], data.get('test'), data['marks'], actor=request.user,
        )
        return self._week_response(class_week)
