"""
Management command to advance every active student one year level.
"""

from django.core.management.base import BaseCommand

from apps.academics.services import TermClock


class Command(BaseCommand):
    help = 'Advance active students one year level; final-year students graduate'

    def handle(self, *args, **options):
        report = TermClock.rollover_student_years()

        self.stdout.write(self.style.SUCCESS('Student year rollover complete'))
        self.stdout.write(f'  Advanced:  {report.advanced}')
        self.stdout.write(f'  Graduated: {report.graduated}')
        if report.failures:
            self.stdout.write(self.style.WARNING(f'  Failed:    {len(report.failures)}'))
            for failure in report.failures:
                self.stdout.write(f"    {failure['student_id']}: {failure['error']}")
