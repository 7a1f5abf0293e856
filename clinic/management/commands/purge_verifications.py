from django.core.management.base import BaseCommand

from clinic.services import otp


class Command(BaseCommand):
    help = "Delete consumed or expired phone verification codes."

    def add_arguments(self, parser):
        parser.add_argument("--hours", type=int, default=24, help="Only rows older than this many hours")

    def handle(self, *args, **options):
        deleted = otp.purge(older_than_hours=options["hours"])
        self.stdout.write(self.style.SUCCESS(f"Purged {deleted} verification codes"))
