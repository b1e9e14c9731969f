from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from clinic.models import User

# one login per role, used by the front-end smoke tests and the API client
ROLE_ACCOUNTS = [
    ("admin1", "admin"),
    ("doctor1", "doctor"),
    ("nurse1", "nurse"),
    ("lab1", "lab_technician"),
    ("reception1", "registration"),
    ("billing1", "billing"),
    ("pharmacy1", "pharmacy"),
]


class Command(BaseCommand):
    help = "Create or reset one login per staff role (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="123456")

    def handle(self, *args, **opts):
        hashed = make_password(opts["password"])
        for username, role in ROLE_ACCOUNTS:
            is_staff = role == "admin"
            user, created = User.objects.update_or_create(
                username=username,
                defaults={"role": role, "password": hashed, "is_active": True, "is_staff": is_staff},
            )
            verb = "created" if created else "reset"
            self.stdout.write(self.style.SUCCESS(f"{verb}: {user.username} ({role})"))
        self.stdout.write(self.style.SUCCESS(f"{len(ROLE_ACCOUNTS)} role accounts ready."))
