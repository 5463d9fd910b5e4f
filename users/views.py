import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import authenticate
from django.utils import timezone
from oauth2_provider.models import AccessToken, Application, RefreshToken
from oauthlib.common import generate_token
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from main.exceptions import Conflict
from .capabilities import capability_table
from .mixins import StoreFilterMixin, get_store_for_request
from .models import User
from .permissions import CanManageUsers
from .serializers import (
    ChangePasswordSerializer, LoginSerializer, ProfileSerializer, ProfileUpdateSerializer,
    UserCreateSerializer, UserSerializer, UserUpdateSerializer
)

logger = logging.getLogger(__name__)

OAUTH_APPLICATION_NAME = 'pos-frontend'


def get_oauth_application():
    application, _ = Application.objects.get_or_create(
        name=OAUTH_APPLICATION_NAME,
        defaults={
            'client_type': Application.CLIENT_PUBLIC,
            'authorization_grant_type': Application.GRANT_PASSWORD,
        },
    )
    return application


def issue_tokens(user):
    """Create an access/refresh token pair for ``user``."""
    application = get_oauth_application()
    expires = timezone.now() + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS)
    access_token = AccessToken.objects.create(
        user=user,
        application=application,
        token=generate_token(),
        expires=expires,
        scope='read write'
    )
    refresh_token = RefreshToken.objects.create(
        user=user,
        application=application,
        token=generate_token(),
        access_token=access_token
    )
    return access_token, refresh_token


def _bearer_token(request):
    auth_header = request.META.get('HTTP_AUTHORIZATION', '')
    if auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1]
    return None


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login endpoint that returns access and refresh tokens
    """
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'Username and password are required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    user = authenticate(
        username=serializer.validated_data['username'],
        password=serializer.validated_data['password'],
    )

    if user is None:
        logger.info("Failed login for %s", serializer.validated_data['username'])
        return Response(
            {'error': 'Invalid username or password'},
            status=status.HTTP_401_UNAUTHORIZED
        )

    if user.store_id is not None and not user.store.is_active:
        return Response(
            {'error': 'Store is suspended'},
            status=status.HTTP_403_FORBIDDEN
        )

    access_token, refresh_token = issue_tokens(user)
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    return Response({
        'access_token': access_token.token,
        'refresh_token': refresh_token.token,
        'expires_in': settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        'token_type': 'Bearer',
        'user': ProfileSerializer(user).data
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """Logout by revoking tokens"""
    token_string = _bearer_token(request)
    if token_string:
        access_token = AccessToken.objects.filter(token=token_string).first()
        if access_token is not None:
            RefreshToken.objects.filter(access_token=access_token).delete()
            access_token.delete()
            return Response({'message': 'Successfully logged out'})

    return Response({'message': 'Logged out'})


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def current_user_view(request):
    """Get or update the current user's own profile"""
    user = request.user
    if request.method == 'GET':
        return Response(ProfileSerializer(user).data)

    serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    username = serializer.validated_data.get('username')
    if username and User.objects.filter(username=username).exclude(pk=user.pk).exists():
        raise Conflict('Username already in use')

    serializer.save()
    return Response(ProfileSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    """Change user password"""
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    if not user.check_password(serializer.validated_data['old_password']):
        return Response(
            {'error': 'Old password is incorrect'},
            status=status.HTTP_400_BAD_REQUEST
        )

    user.set_password(serializer.validated_data['new_password'])
    user.save()

    return Response({'message': 'Password changed successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def capabilities_view(request):
    """Role capability table, shared with the client"""
    return Response(capability_table())


class UserListCreateView(StoreFilterMixin, generics.ListCreateAPIView):
    """
    List users or create a new one.
    - Super Admin: any user, any store, may create super admins
    - Store Admin: users of their own store only
    """
    queryset = User.objects.select_related('store').all()
    permission_classes = [IsAuthenticated, CanManageUsers]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return UserCreateSerializer
        return UserSerializer

    def perform_create(self, serializer):
        user = self.request.user
        data = serializer.validated_data

        if User.objects.filter(username=data['username']).exists():
            raise Conflict('Username already exists')

        if data.get('role') == User.Role.SUPER_ADMIN:
            if not user.is_super_admin:
                raise PermissionDenied('Only super admins can create super admins.')
            serializer.save(store=None)
            return

        store = get_store_for_request(self.request, data.get('store'))
        serializer.save(store=store)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return Response(UserSerializer(serializer.instance).data, status=status.HTTP_201_CREATED)


class UserDetailView(StoreFilterMixin, generics.RetrieveUpdateDestroyAPIView):
    """Retrieve, update or delete a user of the caller's store"""
    queryset = User.objects.select_related('store').all()
    permission_classes = [IsAuthenticated, CanManageUsers]

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return UserUpdateSerializer
        return UserSerializer

    def perform_update(self, serializer):
        role = serializer.validated_data.get('role')
        if role == User.Role.SUPER_ADMIN and not self.request.user.is_super_admin:
            raise PermissionDenied('Only super admins can grant the super admin role.')
        if role and role != User.Role.SUPER_ADMIN and serializer.instance.store_id is None:
            raise ValidationError({'role': 'Store users must be assigned to a store.'})
        serializer.save()

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise PermissionDenied('You cannot delete your own account.')
        instance.delete()
