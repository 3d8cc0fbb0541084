"""
Management command to make a term the current term.
"""

import uuid

from django.core.management.base import BaseCommand, CommandError

from apps.academics.models import Term
from apps.academics.services import TermClock
from apps.core.exceptions import SchedulingError
from apps.users.models import User


class Command(BaseCommand):
    help = 'Activate a term by name or id, rolling student years over if it starts a school year'

    def add_arguments(self, parser):
        parser.add_argument('term', type=str, help='Term name or id')
        parser.add_argument(
            '--operator',
            type=str,
            help='Email of the administrator recorded in the audit log',
        )

    def handle(self, *args, **options):
        term = Term.objects.filter(name=options['term']).first()
        if term is None:
            try:
                term = Term.objects.filter(pk=uuid.UUID(options['term'])).first()
            except ValueError:
                term = None
        if term is None:
            raise CommandError(f"Term '{options['term']}' not found")

        operator = None
        if options.get('operator'):
            operator = User.objects.filter(email=options['operator']).first()
            if operator is None:
                raise CommandError(f"User '{options['operator']}' not found")

        try:
            result = TermClock.activate(term.pk, initiated_by=operator)
        except SchedulingError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(f'{result.term.name} is now the current term'))
        if result.rollover:
            self._write_report(result.rollover)

    def _write_report(self, report):
        self.stdout.write(f'  Advanced:  {report.advanced}')
        self.stdout.write(f'  Graduated: {report.graduated}')
        if report.failures:
            self.stdout.write(self.style.WARNING(f'  Failed:    {len(report.failures)}'))
            for failure in report.failures:
                self.stdout.write(f"    {failure['student_id']}: {failure['error']}")
