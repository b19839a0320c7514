from django.core.management.base import BaseCommand, CommandError

from assignment.services.trip_lifecycle import expire_stale_assignments
from logistics_core.exceptions import LedgerError


class Command(BaseCommand):
    help = 'Complete assignments left open from a previous day and expire their open discharges'

    def add_arguments(self, parser):
        parser.add_argument('--driver', type=int, help='Only sweep assignments of this driver id')

    def handle(self, *args, **options):
        try:
            completed = expire_stale_assignments(driver_id=options.get('driver'))
        except LedgerError as exc:
            raise CommandError(exc.message)
        if completed:
            self.stdout.write(self.style.SUCCESS(
                f"Auto-completed {len(completed)} assignment(s): {', '.join(str(i) for i in completed)}"
            ))
        else:
            self.stdout.write('No stale assignments.')
