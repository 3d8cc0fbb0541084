# apps/followups/views.py

from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.permissions import IsAdmin, IsAdminOrReadOnly

from .models import Followup
from .serializers import FollowupSerializer
from .services import FollowupService


class FollowupViewSet(viewsets.ModelViewSet):
    """
    Follow-ups ordered by due date. Only administrators change them.
    """
    serializer_class = FollowupSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = Followup.objects.select_related('created_by')
        is_completed = self.request.query_params.get('is_completed')
        if is_completed is not None:
            queryset = queryset.filter(is_completed=is_completed.lower() in ('1', 'true', 'yes'))
        if self.request.query_params.get('overdue', '').lower() in ('1', 'true', 'yes'):
            queryset = queryset.overdue(timezone.localdate())
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        is_completed = serializer.validated_data.get('is_completed', False)
        followup = serializer.save(created_by=request.user, is_completed=False)
        if is_completed:
            followup = FollowupService.mark_complete(followup.pk, actor=request.user)
        return Response(self.get_serializer(followup).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        followup = FollowupService.update(instance.pk, actor=request.user, **serializer.validated_data)
        return Response(self.get_serializer(followup).data)

    @action(detail=True, methods=['patch'], permission_classes=[IsAdmin])
    def complete(self, request, pk=None):
        followup = FollowupService.mark_complete(pk, actor=request.user)
        return Response(self.get_serializer(followup).data)
