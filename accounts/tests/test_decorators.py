import json

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Group
from django.core.exceptions import PermissionDenied
from django.http import HttpResponse
from django.test import RequestFactory, TestCase

from accounts.decorators import (
    ADMIN_GROUP,
    admin_api_required,
    admin_required,
    is_admin_user,
    login_required_api,
)


@admin_api_required
def _admin_api_view(request):
    return HttpResponse("ok")


@login_required_api
def _member_api_view(request):
    return HttpResponse("ok")


@admin_required
def _admin_page(request):
    return HttpResponse("ok")


class RoleGuardTests(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        User = get_user_model()
        self.superuser = User.objects.create_superuser("root", "root@example.com", "pw")
        self.admin = User.objects.create_user("admin", "admin@example.com", "pw")
        self.admin.groups.add(Group.objects.create(name=ADMIN_GROUP))
        self.member = User.objects.create_user("member", "member@example.com", "pw")

    def _request(self, user):
        request = self.factory.get("/")
        request.user = user
        return request

    def test_is_admin_user(self):
        self.assertTrue(is_admin_user(self.superuser))
        self.assertTrue(is_admin_user(self.admin))
        self.assertFalse(is_admin_user(self.member))
        self.assertFalse(is_admin_user(AnonymousUser()))

    def test_admin_api_required_rejects_anonymous_and_members(self):
        for user in (AnonymousUser(), self.member):
            response = _admin_api_view(self._request(user))
            self.assertEqual(response.status_code, 401)
            self.assertEqual(json.loads(response.content), {"error": "UNAUTHORIZED"})

    def test_admin_api_required_allows_admins(self):
        for user in (self.superuser, self.admin):
            self.assertEqual(_admin_api_view(self._request(user)).status_code, 200)

    def test_login_required_api(self):
        self.assertEqual(_member_api_view(self._request(AnonymousUser())).status_code, 401)
        self.assertEqual(_member_api_view(self._request(self.member)).status_code, 200)

    def test_admin_required_raises_permission_denied_for_members(self):
        with self.assertRaises(PermissionDenied):
            _admin_page(self._request(self.member))
        self.assertEqual(_admin_page(self._request(self.admin)).status_code, 200)

    def test_admin_required_redirects_anonymous_to_login(self):
        response = _admin_page(self._request(AnonymousUser()))
        self.assertEqual(response.status_code, 302)
