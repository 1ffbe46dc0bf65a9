from rest_framework_simplejwt.views import TokenObtainPairView

from accounts.serializers import CustomTokenObtainPairSerializer


class RoleTokenObtainPairView(TokenObtainPairView):
    """
    Issue JWT tokens with the user's role embedded in the payload
    """
    serializer_class = CustomTokenObtainPairSerializer
