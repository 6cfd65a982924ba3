# permissions/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import (
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_PICKER,
    ROLE_RECEIVER,
    STAFF_ROLES,
)


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    username: str
    email: str


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin", "admin@example.com"),
    SeedUserSpec("Manager", ROLE_MANAGER, "manager", "manager@example.com"),
    SeedUserSpec("Receiver", ROLE_RECEIVER, "receiver", "receiver@example.com"),
    SeedUserSpec("Picker", ROLE_PICKER, "picker", "picker@example.com"),
]


class Command(BaseCommand):
    help = "Create the warehouse role groups (admin/manager/receiver/picker) and optional demo users."

    def add_arguments(self, parser):
        parser.add_argument(
            "--groups-only",
            action="store_true",
            help="Only create the role groups; do not create users.",
        )
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="If set, resets password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not options.get("groups_only") and len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        groups = {}
        for role in sorted(STAFF_ROLES):
            group, created = Group.objects.get_or_create(name=role)
            groups[role] = group
            self.stdout.write(f"{'created' if created else 'exists '}: group {role}")

        if options.get("groups_only"):
            return

        User = get_user_model()
        created_count = 0
        reset_count = 0

        for spec in SEED_USERS:
            user, created = User.objects.get_or_create(
                username=spec.username,
                defaults={"email": spec.email, "is_staff": True},
            )

            if created or force_password:
                user.set_password(password)
                user.save(update_fields=["password"])
                if not created:
                    reset_count += 1

            if spec.role == ROLE_ADMIN and not user.is_superuser:
                user.is_superuser = True
                user.is_staff = True
                user.save(update_fields=["is_superuser", "is_staff"])

            user.groups.add(groups[spec.role])

            if created:
                created_count += 1
                self.stdout.write(f"created: {spec.label} ({spec.role})")
            else:
                self.stdout.write(f"exists : {spec.label} ({spec.role})")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created users: {created_count}")
        if force_password:
            self.stdout.write(f"Passwords reset: {reset_count}")
