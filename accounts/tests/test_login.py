from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings


@override_settings(ROOT_URLCONF='accounts.tests.urls_without_admin')
class LoginWithoutAdminSiteTests(TestCase):
    def test_anonymous_pages_redirect_to_sign_in(self):
        for url in ('/availability/', '/availability/1/', '/apps/admin/other/'):
            with self.subTest(url=url):
                response = self.client.get(url)
                self.assertEqual(response.status_code, 302)
                self.assertEqual(response['Location'], f'/accounts/login/?next={url}')

    def test_sign_in_page_renders(self):
        response = self.client.get('/accounts/login/')
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Sign in')

    def test_sign_in_returns_to_next(self):
        get_user_model().objects.create_user('ana', 'ana@example.com', 'pw-12345')
        response = self.client.post(
            '/accounts/login/',
            {'username': 'ana', 'password': 'pw-12345', 'next': '/availability/'},
        )
        self.assertRedirects(response, '/availability/')
