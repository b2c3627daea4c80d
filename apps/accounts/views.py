from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema
from .models import Notification
from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
    PayoutDetailsSerializer,
    NotificationSerializer,
)
from .services import (
    register_user,
    authenticate_user,
    update_payout_details,
    validate_payout_details,
    mark_notification_read,
    mark_all_notifications_read,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidBankDetailsError,
    NotificationNotFoundError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class LogoutRequestSerializer(serializers.Serializer):
    refresh = serializers.CharField(help_text="Refresh token to invalidate", required=False)


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _auth_response(user, message, status_code=status.HTTP_200_OK):
    refresh = RefreshToken.for_user(user)
    return Response({
        'message': message,
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    }, status=status_code)


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Register a new therapist account (optionally with a referral code) and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        user = register_user(**data)
    except UserRegistrationError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )

    return _auth_response(
        user,
        'Registration successful. Please verify your email.',
        status_code=status.HTTP_201_CREATED,
    )


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate with email and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = UserLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        user = authenticate_user(**serializer.validated_data)
    except InvalidCredentialsError:
        return Response({
            'error': 'Invalid credentials'
        }, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError:
        return Response({
            'error': 'Account is deactivated'
        }, status=status.HTTP_403_FORBIDDEN)

    return _auth_response(user, 'Login successful')


@extend_schema(
    request=LogoutRequestSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
    },
    description="Logout. A refresh token, when sent, must be valid.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Logout; the client drops its tokens."""
    refresh_token = request.data.get('refresh')
    if refresh_token:
        try:
            RefreshToken(refresh_token)
        except TokenError:
            return Response({
                'error': 'Invalid token'
            }, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'message': 'Logout successful'
    })


@extend_schema(
    methods=['GET'],
    responses={200: UserSerializer},
    description="Get the current therapist's profile.",
    tags=['auth'],
)
@extend_schema(
    methods=['PATCH'],
    request=UserSerializer,
    responses={200: UserSerializer, 400: ErrorResponseSerializer},
    description="Update profile fields (display name, profession, practice defaults).",
    tags=['auth'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def current_user(request):
    """Get or update the current user profile."""
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    serializer = UserSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@extend_schema(
    methods=['GET'],
    responses={200: PayoutDetailsSerializer},
    description="Get payout (PIX / bank) details used for referral commissions.",
    tags=['auth'],
)
@extend_schema(
    methods=['PATCH'],
    request=PayoutDetailsSerializer,
    responses={200: PayoutDetailsSerializer, 400: ErrorResponseSerializer},
    description="Update payout details. Any change resets validation.",
    tags=['auth'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def payout_details(request):
    if request.method == 'GET':
        return Response(PayoutDetailsSerializer(request.user).data)

    serializer = PayoutDetailsSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)

    try:
        user = update_payout_details(user=request.user, **serializer.validated_data)
    except InvalidBankDetailsError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PayoutDetailsSerializer(user).data)


@extend_schema(
    request=None,
    responses={200: PayoutDetailsSerializer, 400: ErrorResponseSerializer},
    description="Validate payout details (PIX key, or complete bank details with CPF/CNPJ).",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def validate_payout(request):
    try:
        user = validate_payout_details(user=request.user)
    except InvalidBankDetailsError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PayoutDetailsSerializer(user).data)


@extend_schema(
    responses={200: NotificationSerializer(many=True)},
    description="List the current user's notifications, newest first. Use ?unread=true to filter.",
    tags=['notifications'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    queryset = Notification.objects.filter(user=request.user)
    if request.query_params.get('unread') in ('1', 'true', 'True'):
        queryset = queryset.filter(read_at__isnull=True)

    paginator = NotificationPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(NotificationSerializer(page, many=True).data)


@extend_schema(
    request=None,
    responses={200: NotificationSerializer, 404: ErrorResponseSerializer},
    description="Mark a notification as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read(request, pk):
    try:
        notification = mark_notification_read(notification_id=pk, user=request.user)
    except NotificationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(NotificationSerializer(notification).data)


@extend_schema(
    request=None,
    responses={200: MessageResponseSerializer},
    description="Mark all notifications as read.",
    tags=['notifications'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_read_all(request):
    count = mark_all_notifications_read(user=request.user)
    return Response({'message': f'{count} notification(s) marked as read'})
