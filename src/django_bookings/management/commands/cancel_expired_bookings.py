"""Management command to cancel bookings left unpaid past their deadline."""

from django.core.management.base import BaseCommand

from django_bookings.services import cancel_expired_bookings, find_expired_bookings


class Command(BaseCommand):
    help = 'Cancel confirmed bookings that are still unpaid after their payment deadline'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List bookings that would be cancelled without cancelling them'
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            expired = find_expired_bookings().select_related('activity', 'user')
            self.stdout.write(f'Would cancel {expired.count()} expired bookings')
            for booking in expired:
                self.stdout.write(
                    f'  - #{booking.pk} {booking} (deadline {booking.payment_deadline:%Y-%m-%d %H:%M})'
                )
            return

        count = cancel_expired_bookings()
        self.stdout.write(
            self.style.SUCCESS(f'Cancelled {count} expired bookings')
        )
