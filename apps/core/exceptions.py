# apps/core/exceptions.py
"""
Error kinds raised by the scheduling and booking services.

Malformed input is reported with Django's ``ValidationError`` (the same way
model ``clean()`` methods do); everything else that a caller can recover from
derives from ``SchedulingError`` and carries a machine-readable ``code`` plus
the HTTP status the API layer answers with.
"""


class SchedulingError(Exception):
    code = 'scheduling_error'
    status_code = 400
    default_message = 'The request could not be completed.'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def as_dict(self):
        data = {'code': self.code, 'detail': self.message}
        data.update(self.details)
        return data


class NotFound(SchedulingError):
    code = 'not_found'
    status_code = 404
    default_message = 'Not found.'

    @classmethod
    def for_model(cls, model, pk):
        name = model._meta.verbose_name.title()
        return cls(f'{name} not found', model=model.__name__, id=str(pk))


class ScheduleConflict(SchedulingError):
    code = 'schedule_conflict'
    status_code = 409

    def __init__(self, conflicting_class_name):
        self.conflicting_class_name = conflicting_class_name
        super().__init__(
            f'Schedule conflicts with {conflicting_class_name}',
            conflicting_class_name=conflicting_class_name,
        )


class SlotFull(SchedulingError):
    code = 'slot_full'
    status_code = 409

    def __init__(self, slot_id, capacity, booked_count):
        super().__init__(
            f'Detention slot is full ({booked_count}/{capacity} seats booked)',
            slot_id=str(slot_id),
            capacity=capacity,
            booked_count=booked_count,
        )


class SlotInUse(SchedulingError):
    code = 'slot_in_use'
    status_code = 409

    def __init__(self, slot_id, booked_count):
        super().__init__(
            f'Cannot delete slot with active bookings ({booked_count} booked)',
            slot_id=str(slot_id),
            booked_count=booked_count,
        )


class CurrentTermInvariantViolation(SchedulingError):
    code = 'current_term'
    status_code = 409
    default_message = 'Cannot delete current term'


class StoreUnavailable(SchedulingError):
    code = 'store_unavailable'
    status_code = 503
    default_message = 'The data store is temporarily unavailable, please retry.'
