# apps/detentions/services.py
"""
Detention slot inventory and the detention booking lifecycle.

Seat counts only ever change through single conditional UPDATE statements,
so ``0 <= booked_count <= capacity`` holds however many requests race for
the last seat.
"""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F, ProtectedError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.academics.models import Term, Classroom
from apps.audit.models import AuditLog
from apps.audit.services import record_operation
from apps.communication.models import Notification
from apps.communication.services import NotificationService
from apps.core.exceptions import NotFound, SlotFull, SlotInUse
from apps.core.permissions import is_admin
from apps.core.timeutils import format_hhmm, parse_hhmm

from . import slots
from .models import DetentionSlot, Detention

logger = logging.getLogger(__name__)


def _get(model, value):
    """Accept a model instance or a primary key."""
    if isinstance(value, model):
        return value
    try:
        return model.objects.get(pk=value)
    except model.DoesNotExist:
        raise NotFound.for_model(model, value)


def _validate_window(start_time, end_time):
    start, end = parse_hhmm(start_time), parse_hhmm(end_time)
    if end <= start:
        raise ValidationError(_('End time must be after start time.'), code='invalid_window')
    return start, end


class DetentionSlotStore:
    """
    Service class for creating, toggling and counting detention slots.
    """

    @staticmethod
    def create_explicit(date, start_time, end_time, classroom_id, created_by=None):
        start, end = _validate_window(start_time, end_time)
        classroom = _get(Classroom, classroom_id)
        slot = DetentionSlot.objects.create(
            date=date,
            start_time=start,
            end_time=end,
            classroom=classroom,
            capacity=classroom.capacity,
            booked_count=0,
            created_by=created_by,
        )
        logger.info(f"Detention slot created in {classroom.name} on {date} {format_hhmm(start)}-{format_hhmm(end)}")
        return slot

    @staticmethod
    def create_batch(dates, start_time, end_time, classroom_id, created_by=None):
        """
        Create one slot per date with a shared window. Either every slot is
        created or none is.
        """
        dates = list(dates or [])
        if not dates:
            raise ValidationError(_('At least one date is required.'), code='empty_batch')
        if len(set(dates)) != len(dates):
            raise ValidationError(_('Dates in a batch must be distinct.'), code='duplicate_dates')

        start, end = _validate_window(start_time, end_time)
        classroom = _get(Classroom, classroom_id)

        with transaction.atomic():
            created = [
                DetentionSlot.objects.create(
                    date=slot_date,
                    start_time=start,
                    end_time=end,
                    classroom=classroom,
                    capacity=classroom.capacity,
                    booked_count=0,
                    created_by=created_by,
                )
                for slot_date in dates
            ]

        logger.info(f"{len(created)} detention slots created in {classroom.name}")
        return created

    @staticmethod
    def _coordinate_lookup(term, classroom, week, day_of_week, slot_number):
        window = slots.resolve(term, week, day_of_week, slot_number)
        return {
            'term': term,
            'classroom': classroom,
            'week': week,
            'date': window.date,
            'start_time': window.start_time,
            'end_time': window.end_time,
        }

    @classmethod
    def enable_at_coordinate(cls, term, classroom, week, day_of_week, slot_number, created_by=None):
        """
        Make sure a slot exists at the coordinate. Returns ``(slot, created)``;
        calling it again for the same coordinate returns the existing slot.
        """
        term = _get(Term, term)
        classroom = _get(Classroom, classroom)
        lookup = cls._coordinate_lookup(term, classroom, week, day_of_week, slot_number)

        try:
            with transaction.atomic():
                slot, created = DetentionSlot.objects.get_or_create(
                    **lookup,
                    defaults={'capacity': classroom.capacity, 'booked_count': 0, 'created_by': created_by},
                )
        except IntegrityError:
            # Lost an insert race for the same coordinate.
            slot, created = DetentionSlot.objects.get(**lookup), False

        if created:
            record_operation(
                created_by, AuditLog.ActionType.CREATE, 'DetentionSlot', slot.pk,
                operation='enable', week=week, day_of_week=day_of_week, slot_number=slot_number,
            )
        return slot, created

    @classmethod
    def disable_at_coordinate(cls, term, classroom, week, day_of_week, slot_number, actor=None):
        """
        Remove the slot at the coordinate. Returns ``False`` when there is
        nothing to remove and raises ``SlotInUse`` when seats are booked.
        """
        term = _get(Term, term)
        classroom = _get(Classroom, classroom)
        lookup = cls._coordinate_lookup(term, classroom, week, day_of_week, slot_number)

        slot = DetentionSlot.objects.filter(**lookup).first()
        if slot is None:
            return False

        cls.delete(slot.pk)
        record_operation(
            actor, AuditLog.ActionType.DELETE, 'DetentionSlot', slot.pk,
            operation='disable', week=week, day_of_week=day_of_week, slot_number=slot_number,
        )
        return True

    @staticmethod
    def reserve(slot_id):
        """Take one seat in the slot. Raises ``SlotFull`` without changing anything when none is left."""
        updated = DetentionSlot.objects.filter(
            pk=slot_id, booked_count__lt=F('capacity')
        ).update(booked_count=F('booked_count') + 1, updated_at=timezone.now())

        if not updated:
            current = DetentionSlot.objects.filter(pk=slot_id).values('capacity', 'booked_count').first()
            if current is None:
                raise NotFound.for_model(DetentionSlot, slot_id)
            raise SlotFull(slot_id, current['capacity'], current['booked_count'])

        return DetentionSlot.objects.get(pk=slot_id)

    @staticmethod
    def release(slot_id):
        """
        Give one seat back. Returns ``False`` (and logs) instead of letting the
        count drop below zero.
        """
        updated = DetentionSlot.objects.filter(
            pk=slot_id, booked_count__gt=0
        ).update(booked_count=F('booked_count') - 1, updated_at=timezone.now())

        if not updated:
            if not DetentionSlot.objects.filter(pk=slot_id).exists():
                raise NotFound.for_model(DetentionSlot, slot_id)
            logger.error(f"Release on detention slot {slot_id} with no booked seats; booked_count left at 0")
            return False
        return True

    @staticmethod
    def delete(slot_id):
        try:
            deleted, _rows = DetentionSlot.objects.filter(pk=slot_id, booked_count=0).delete()
        except ProtectedError:
            deleted = 0

        if not deleted:
            current = DetentionSlot.objects.filter(pk=slot_id).values('booked_count').first()
            if current is None:
                raise NotFound.for_model(DetentionSlot, slot_id)
            raise SlotInUse(slot_id, current['booked_count'])

        logger.info(f"Detention slot {slot_id} deleted")

    @staticmethod
    def update(slot_id, date=None, start_time=None, end_time=None, classroom_id=None):
        """
        Move a slot in time or to another classroom. Changing classroom copies
        the new room's capacity, which may not drop below the seats already booked.
        """
        with transaction.atomic():
            try:
                slot = DetentionSlot.objects.select_for_update().get(pk=slot_id)
            except DetentionSlot.DoesNotExist:
                raise NotFound.for_model(DetentionSlot, slot_id)

            if date is not None:
                slot.date = date
            start, end = _validate_window(
                start_time if start_time is not None else slot.start_time,
                end_time if end_time is not None else slot.end_time,
            )
            slot.start_time, slot.end_time = start, end

            if classroom_id is not None:
                classroom = _get(Classroom, classroom_id)
                if classroom.capacity < slot.booked_count:
                    raise ValidationError(
                        _('%(room)s seats %(capacity)s but %(booked)s seats are already booked.'),
                        code='capacity_below_bookings',
                        params={'room': classroom.name, 'capacity': classroom.capacity, 'booked': slot.booked_count},
                    )
                slot.classroom = classroom
                slot.capacity = classroom.capacity

            try:
                with transaction.atomic():
                    slot.save()
            except IntegrityError:
                raise ValidationError(_('Another slot already occupies this time.'), code='duplicate_slot')
        return slot

    @staticmethod
    def grid(term_id, classroom_id):
        """All slots of a term in one classroom, in calendar order."""
        _get(Term, term_id)
        _get(Classroom, classroom_id)
        return DetentionSlot.objects.filter(
            term_id=term_id, classroom_id=classroom_id
        ).select_related('classroom', 'term').order_by('week', 'date', 'start_time')

    @staticmethod
    def available(on_date=None):
        queryset = DetentionSlot.objects.available().select_related('classroom')
        if on_date is not None:
            queryset = queryset.on_date(on_date)
        return queryset


class DetentionLifecycle:
    """
    Assign, book, resolve and delete detentions.

    A detention moves ``assigned -> booked -> completed``; an incomplete or
    absent outcome sends it back to ``assigned`` with its seat released.
    """

    @staticmethod
    def assign(class_ref, student, week, reason, assigned_by=None):
        if not getattr(student, 'is_student', False):
            raise ValidationError(_('Detentions can only be assigned to students.'), code='not_a_student')
        if not isinstance(week, int) or week < 1:
            raise ValidationError(_('Week must be a positive whole number.'), code='invalid_week')
        if not reason or not reason.strip():
            raise ValidationError(_('A reason is required.'), code='missing_reason')

        with transaction.atomic():
            detention = Detention.objects.create(
                class_ref=class_ref,
                student=student,
                week=week,
                reason=reason.strip(),
                status=Detention.Status.ASSIGNED,
                attempts=0,
                assigned_by=assigned_by,
                assigned_at=timezone.now(),
            )
            record_operation(
                assigned_by, AuditLog.ActionType.CREATE, 'Detention', detention.pk,
                student=str(student.pk), class_name=class_ref.name, week=week,
            )
            NotificationService.notify(
                student,
                title='Detention assigned',
                message=f'You have a detention for {class_ref.name} (week {week}): {detention.reason}. Please book a session.',
                notification_type=Notification.NotificationType.DETENTION_ASSIGNED,
            )

        logger.info(f"Detention assigned to {student} for {class_ref.name} week {week}")
        return detention

    @staticmethod
    def _lock(detention_id):
        try:
            return Detention.objects.select_for_update().get(pk=detention_id)
        except Detention.DoesNotExist:
            raise NotFound.for_model(Detention, detention_id)

    @classmethod
    def book(cls, detention_id, slot_id, actor=None):
        """
        Book (or move) a detention into a slot.

        Releasing the previous seat and taking the new one happen in one
        transaction; if the new slot is full the previous booking is kept.
        """
        with transaction.atomic():
            detention = cls._lock(detention_id)

            if actor is not None and not is_admin(actor) and detention.student_id != actor.pk:
                raise PermissionDenied(_('You can only book your own detentions.'))
            if detention.status == Detention.Status.COMPLETED:
                raise ValidationError(_('This detention has already been completed.'), code='detention_completed')
            if detention.booked_slot_id is not None and str(detention.booked_slot_id) == str(slot_id):
                return detention

            previous_slot_id = detention.booked_slot_id
            if previous_slot_id is not None:
                DetentionSlotStore.release(previous_slot_id)
            slot = DetentionSlotStore.reserve(slot_id)

            detention.booked_slot = slot
            detention.status = Detention.Status.BOOKED
            detention.save(update_fields=['booked_slot', 'status', 'updated_at'])

            record_operation(
                actor, AuditLog.ActionType.UPDATE, 'Detention', detention.pk,
                operation='book', slot=str(slot.pk),
                previous_slot=str(previous_slot_id) if previous_slot_id else None,
            )
            NotificationService.notify(
                detention.student,
                title='Detention booked',
                message=f'Your detention is booked for {slot.date:%A %d %B} at {format_hhmm(slot.start_time)} in {slot.classroom.name}.',
                notification_type=Notification.NotificationType.DETENTION_BOOKED,
            )

        logger.info(f"Detention {detention.pk} booked into slot {slot.pk}")
        return detention

    @classmethod
    def resolve(cls, detention_id, completion_status, actor=None):
        if completion_status not in Detention.CompletionStatus.values:
            raise ValidationError(
                _('Invalid completion status "%(status)s".'),
                code='invalid_completion_status',
                params={'status': completion_status},
            )

        with transaction.atomic():
            detention = cls._lock(detention_id)
            if detention.status != Detention.Status.BOOKED:
                raise ValidationError(
                    _('Only booked detentions can be resolved.'),
                    code='invalid_transition',
                )

            details = {}
            if completion_status == Detention.CompletionStatus.COMPLETE:
                detention.status = Detention.Status.COMPLETED
                detention.attempts += 1
            else:
                if not DetentionSlotStore.release(detention.booked_slot_id):
                    logger.error(f"Detention {detention.pk} could not give back its seat in slot {detention.booked_slot_id}")
                    details['slot_release_failed'] = True
                detention.booked_slot = None
                detention.status = Detention.Status.ASSIGNED
                if completion_status == Detention.CompletionStatus.INCOMPLETE:
                    detention.attempts += 1

            detention.completion_status = completion_status
            detention.save(update_fields=['status', 'booked_slot', 'attempts', 'completion_status', 'updated_at'])

            record_operation(
                actor, AuditLog.ActionType.UPDATE, 'Detention', detention.pk,
                operation='resolve', completion_status=completion_status, attempts=detention.attempts,
                **details,
            )
            NotificationService.notify(
                detention.student,
                title='Detention updated',
                message=f'Your detention for {detention.class_ref.name} was marked {completion_status}.',
                notification_type=Notification.NotificationType.DETENTION_RESOLVED,
            )

        logger.info(f"Detention {detention.pk} resolved as {completion_status}")
        return detention

    @classmethod
    def delete(cls, detention_id, actor=None):
        with transaction.atomic():
            detention = cls._lock(detention_id)
            slot_id = detention.booked_slot_id
            detention.delete()
            details = {}
            if slot_id is not None and not DetentionSlotStore.release(slot_id):
                logger.error(f"Deleted detention {detention_id} could not give back its seat in slot {slot_id}")
                details['slot_release_failed'] = True
            record_operation(actor, AuditLog.ActionType.DELETE, 'Detention', detention_id, **details)

        logger.info(f"Detention {detention_id} deleted")

    @staticmethod
    def todays_detentions(today=None):
        today = today or timezone.localdate()
        return (
            Detention.objects.filter(booked_slot__date=today)
            .select_related('class_ref', 'student', 'booked_slot__classroom', 'assigned_by')
            .order_by('booked_slot__start_time')
        )

    @staticmethod
    def unbooked():
        return (
            Detention.objects.filter(status=Detention.Status.ASSIGNED)
            .select_related('class_ref', 'student', 'assigned_by')
            .order_by('assigned_at')
        )
