# accounts/serializers.py
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


class LoginSerializer(TokenObtainPairSerializer):
    """
    JWT login.
    The role claim lets downstream services authorise without a user lookup.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        token["email"] = user.email
        return token

    def validate(self, attrs):
        data = super().validate(attrs)

        data["user"] = {
            "id": self.user.id,
            "role": self.user.role,
            "full_name": self.user.full_name,
            "email": self.user.email,
        }
        return data
