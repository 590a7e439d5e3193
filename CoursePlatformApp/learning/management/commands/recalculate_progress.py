from django.core.management.base import BaseCommand

from CoursePlatformApp.domain.services.progress_service import recalculate_all

class Command(BaseCommand):
    help = "Recompute progress and completion for all enrollments."

    def handle(self, *args, **options):
        processed = recalculate_all()
        self.stdout.write(self.style.SUCCESS(f"Recalculated {processed} enrollments"))
