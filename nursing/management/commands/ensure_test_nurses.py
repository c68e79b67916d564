# nursing/management/commands/ensure_test_nurses.py
from django.core.management.base import BaseCommand

from nursing.models import Nurse

TEST_SET = [
    ("head@ward.test", "Head Nurse One", Nurse.ROLE_HEAD, "General Medicine"),
    ("staff@ward.test", "Staff Nurse One", Nurse.ROLE_STAFF, "Pediatrics"),
    ("junior@ward.test", "Junior Nurse One", Nurse.ROLE_JUNIOR, "Emergency"),
]


class Command(BaseCommand):
    help = "Ensure demo nurses exist, are active and use the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="Ward@demo2024")

    def handle(self, *args, **opts):
        for email, name, role, department in TEST_SET:
            nurse = Nurse.objects.filter(email=email).first()
            if nurse is None:
                nurse = Nurse.objects.create_user(email, opts["password"], name=name, role=role, department=department)
            else:
                # reset password, status and role
                nurse.set_password(opts["password"])
                nurse.role = role
                nurse.status = Nurse.STATUS_ACTIVE
                nurse.save(update_fields=["password", "role", "status"])
            self.stdout.write(self.style.SUCCESS(f"ok: {nurse.nurse_id} {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test nurses ensured."))
