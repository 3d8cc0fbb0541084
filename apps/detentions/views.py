# apps/detentions/views.py

import logging

from django.utils.dateparse import parse_date
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.permissions import IsAdmin, IsAdminOrReadOnly, IsStaffMember, is_staff_member

from .models import DetentionSlot, Detention
from .serializers import (
    DetentionSlotSerializer, SlotCreateSerializer, SlotUpdateSerializer, SlotCoordinateSerializer,
    DetentionSerializer, BookSlotSerializer, ResolveSerializer,
)
from .services import DetentionSlotStore, DetentionLifecycle

logger = logging.getLogger(__name__)


def _truthy(value):
    return str(value).lower() in ('1', 'true', 'yes')


class DetentionSlotViewSet(viewsets.ModelViewSet):
    """
    Bookable detention slots. Seat counts are read-only here; they change
    only through detention bookings.
    """
    serializer_class = DetentionSlotSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = DetentionSlot.objects.select_related('classroom', 'term')
        params = self.request.query_params

        slot_date = params.get('date')
        if slot_date:
            parsed = parse_date(slot_date)
            if parsed is None:
                return queryset.none()
            queryset = queryset.filter(date=parsed)
        if params.get('classroom'):
            queryset = queryset.filter(classroom_id=params['classroom'])
        if params.get('term'):
            queryset = queryset.filter(term_id=params['term'])
        if _truthy(params.get('available', '')):
            queryset = queryset.available()
        return queryset.order_by('date', 'start_time')

    def create(self, request, *args, **kwargs):
        serializer = SlotCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if 'dates' in data:
            created = DetentionSlotStore.create_batch(
                data['dates'], data['start_time'], data['end_time'], data['classroom'], created_by=request.user,
            )
            return Response({
                'message': f'{len(created)} detention slots created',
                'slots': DetentionSlotSerializer(created, many=True).data,
            }, status=status.HTTP_201_CREATED)

        slot = DetentionSlotStore.create_explicit(
            data['date'], data['start_time'], data['end_time'], data['classroom'], created_by=request.user,
        )
        return Response(DetentionSlotSerializer(slot).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = SlotUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        slot = DetentionSlotStore.update(
            kwargs['pk'],
            date=data.get('date'),
            start_time=data.get('start_time'),
            end_time=data.get('end_time'),
            classroom_id=data.get('classroom'),
        )
        return Response(DetentionSlotSerializer(slot).data)

    def destroy(self, request, *args, **kwargs):
        DetentionSlotStore.delete(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def grid(self, request):
        term, classroom = request.query_params.get('term'), request.query_params.get('classroom')
        if not term or not classroom:
            return Response(
                {'code': 'validation_error', 'detail': 'Term and classroom are required'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        slots = DetentionSlotStore.grid(term, classroom)
        return Response(DetentionSlotSerializer(slots, many=True).data)

    @action(detail=False, methods=['post'], permission_classes=[IsAdmin])
    def toggle(self, request):
        serializer = SlotCoordinateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        coordinate = (data['term'], data['classroom'], data['week'], data['day_of_week'], data['slot_number'])

        if data['enable']:
            slot, created = DetentionSlotStore.enable_at_coordinate(*coordinate, created_by=request.user)
            return Response({
                'message': 'Slot created' if created else 'Slot already exists',
                'created': created,
                'slot': DetentionSlotSerializer(slot).data,
            }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

        deleted = DetentionSlotStore.disable_at_coordinate(*coordinate, actor=request.user)
        return Response({
            'message': 'Slot deleted' if deleted else 'Slot does not exist',
            'deleted': deleted,
        })


class DetentionViewSet(viewsets.ModelViewSet):
    """
    Detentions. Students only ever see and book their own.
    """
    serializer_class = DetentionSerializer
    http_method_names = ['get', 'post', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action in ('create', 'destroy', 'resolve', 'today', 'unbooked'):
            return [IsStaffMember()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        queryset = Detention.objects.select_related(
            'class_ref', 'student', 'booked_slot__classroom', 'assigned_by'
        )
        user = self.request.user
        if not is_staff_member(user):
            queryset = queryset.filter(student=user)

        params = self.request.query_params
        if params.get('student'):
            queryset = queryset.filter(student_id=params['student'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('class'):
            queryset = queryset.filter(class_ref_id=params['class'])
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        detention = DetentionLifecycle.assign(
            data['class_ref'], data['student'], data['week'], data['reason'], assigned_by=request.user,
        )
        return Response(self.get_serializer(detention).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        DetentionLifecycle.delete(kwargs['pk'], actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def book(self, request, pk=None):
        serializer = BookSlotSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        detention = DetentionLifecycle.book(pk, serializer.validated_data['slot'], actor=request.user)
        return Response(self.get_serializer(self.get_queryset().get(pk=detention.pk)).data)

    @action(detail=True, methods=['post'])
    def resolve(self, request, pk=None):
        serializer = ResolveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        detention = DetentionLifecycle.resolve(pk, serializer.validated_data['completion_status'], actor=request.user)
        return Response(self.get_serializer(self.get_queryset().get(pk=detention.pk)).data)

    @action(detail=False, methods=['get'])
    def today(self, request):
        return Response(self.get_serializer(DetentionLifecycle.todays_detentions(), many=True).data)

    @action(detail=False, methods=['get'])
    def unbooked(self, request):
        return Response(self.get_serializer(DetentionLifecycle.unbooked(), many=True).data)
