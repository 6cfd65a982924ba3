# permissions/tests/test_roles.py

from io import StringIO

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management import call_command
from django.test import TestCase

from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_ALLOCATE,
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_VIEW,
    ROLE_PICKER,
    ROLE_RECEIVER,
    effective_capabilities_for,
    get_user_role,
    user_has_capability,
)

User = get_user_model()


class RoleCapabilityTests(TestCase):
    """
    Permission & access tests.

    GUARANTEES:
    - Roles come from auth groups
    - Receivers receive, pickers allocate, neither adjusts
    - Superusers hold every capability
    - Users without a role hold nothing
    """

    def _user(self, username, *roles):
        user = User.objects.create_user(username=username, password="pass1234")
        for role in roles:
            group, _ = Group.objects.get_or_create(name=role)
            user.groups.add(group)
        return user

    def test_receiver_capabilities(self):
        user = self._user("r1", ROLE_RECEIVER)

        self.assertEqual(get_user_role(user), ROLE_RECEIVER)
        self.assertEqual(
            effective_capabilities_for(user),
            {CAP_INVENTORY_VIEW, CAP_INVENTORY_RECEIVE},
        )

    def test_picker_capabilities(self):
        user = self._user("p1", ROLE_PICKER)

        self.assertTrue(user_has_capability(user, CAP_INVENTORY_ALLOCATE))
        self.assertFalse(user_has_capability(user, CAP_INVENTORY_RECEIVE))
        self.assertFalse(user_has_capability(user, CAP_INVENTORY_ADJUST))

    def test_roles_combine(self):
        user = self._user("rp", ROLE_RECEIVER, ROLE_PICKER)

        self.assertTrue(user_has_capability(user, CAP_INVENTORY_RECEIVE))
        self.assertTrue(user_has_capability(user, CAP_INVENTORY_ALLOCATE))

    def test_unrelated_group_grants_nothing(self):
        user = self._user("x1", "marketing")

        self.assertIsNone(get_user_role(user))
        self.assertEqual(effective_capabilities_for(user), set())

    def test_superuser_has_everything(self):
        admin = User.objects.create_superuser(username="root", password="pass1234", email="root@example.com")
        self.assertTrue(user_has_capability(admin, CAP_INVENTORY_ADJUST))

    def test_seed_users_command(self):
        call_command("seed_users", "--password", "secret123", stdout=StringIO())

        self.assertEqual(Group.objects.filter(name__in=["admin", "manager", "receiver", "picker"]).count(), 4)
        picker = User.objects.get(username="picker")
        self.assertTrue(picker.check_password("secret123"))
        self.assertTrue(user_has_capability(picker, CAP_INVENTORY_ALLOCATE))
