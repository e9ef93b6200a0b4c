from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()


class LoginTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email="operator@example.com",
            password="secret123",
            full_name="Turf Operator",
            role=User.BUSINESS,
        )

    def test_login_returns_tokens_with_role(self):
        response = self.client.post(
            reverse("auth-login"),
            {"email": "operator@example.com", "password": "secret123"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["user"]["role"], User.BUSINESS)

        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], User.BUSINESS)
        self.assertEqual(token["email"], "operator@example.com")

    def test_wrong_password(self):
        response = self.client.post(
            reverse("auth-login"),
            {"email": "operator@example.com", "password": "nope"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["status"], "failed")


class UserRoleTests(APITestCase):

    def test_superuser_is_platform_admin(self):
        root = User.objects.create_superuser(email="root@example.com", password="secret123")

        self.assertEqual(root.role, User.ADMIN)
        self.assertTrue(root.is_platform_admin)

    def test_customer_is_not_platform_admin(self):
        user = User.objects.create_user(email="p@example.com", password="secret123")
        self.assertFalse(user.is_platform_admin)
