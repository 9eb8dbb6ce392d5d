# clinic/management/commands/ensure_default_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from clinic.models import User
from clinic.permissions import default_permissions

DEFAULT_SET = [
    ("admin", "admin"),
    ("doctor1", "doctor"),
    ("nurse1", "nurse"),
    ("reception1", "receptionist"),
    ("accountant1", "accountant"),
]


class Command(BaseCommand):
    help = "Ensure one account per role exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="ChangeMe!2024", help="password set on every account")
        parser.add_argument("--reset-permissions", action="store_true",
                            help="also restore each account's permission list to its role default")

    def handle(self, *args, **opts):
        for username, role in DEFAULT_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "role": role,
                    "permissions": default_permissions(role),
                    "password": make_password(opts["password"]),
                    "is_active": True,
                },
            )
            if not created:
                u.password = make_password(opts["password"])
                u.role = role
                u.is_active = True
                fields = ["password", "role", "is_active"]
                if opts["reset_permissions"] or not u.permissions:
                    u.permissions = default_permissions(role)
                    fields.append("permissions")
                u.save(update_fields=fields)
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All default users ensured."))
