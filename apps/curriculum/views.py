# apps/curriculum/views.py

from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.permissions import IsAdmin, IsAdminOrReadOnly, IsStaffMember

from .models import Topic, ClassTest, Progress
from .serializers import (
    TopicSerializer, ClassTestSerializer, ProgressSerializer, ProgressWeekUpdateSerializer,
)
from .services import ProgressService


class TeachingMaterialViewSet(viewsets.ModelViewSet):
    """
    Shared behaviour for topics and tests: teachers write, admins delete.
    """
    search_fields = ('name',)

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAdmin()]
        if self.action in ('create', 'update', 'partial_update'):
            return [IsStaffMember()]
        return [IsAuthenticated()]

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        search = params.get('search')
        if search:
            query = Q()
            for field_name in self.search_fields:
                query |= Q(**{f'{field_name}__icontains': search})
            queryset = queryset.filter(query)
        if params.get('year'):
            queryset = queryset.filter(year=params['year'])
        if params.get('term'):
            queryset = queryset.filter(term_label=params['term'])
        return queryset

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class TopicViewSet(TeachingMaterialViewSet):
    queryset = Topic.objects.all()
    serializer_class = TopicSerializer
    search_fields = ('name', 'content')


class ClassTestViewSet(TeachingMaterialViewSet):
    queryset = ClassTest.objects.all()
    serializer_class = ClassTestSerializer


class ProgressViewSet(viewsets.ModelViewSet):
    """
    Progress plans. Admins manage plans; teachers fill in weekly content.
    """
    serializer_class = ProgressSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = Progress.objects.select_related('term').prefetch_related('weeks__topics', 'weeks__test')
        params = self.request.query_params
        if params.get('term'):
            queryset = queryset.filter(term_id=params['term'])
        if params.get('year'):
            queryset = queryset.filter(year=params['year'])
        return queryset

    @action(detail=True, methods=['patch'], url_path=r'week/(?P<week>[0-9]+)', permission_classes=[IsStaffMember])
    def week(self, request, pk=None, week=None):
        serializer = ProgressWeekUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ProgressService.update_week(pk, int(week), actor=request.user, **serializer.validated_data)
        return Response(self.get_serializer(self.get_queryset().get(pk=pk)).data)
