"""
Authentication views
"""
import logging
from datetime import timedelta

from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.core.exceptions import InvalidState, Unauthorized
from apps.core.pagination import StandardResultsSetPagination
from apps.core.permissions import IsAdmin
from apps.core.utils.constants import (
    AGENT_STATUS_APPROVED,
    AGENT_STATUS_PENDING,
    AGENT_STATUS_REJECTED,
    PROPERTY_STATUS_AVAILABLE,
    USER_ROLE_AGENT,
    USER_ROLE_USER,
)
from apps.notifications.services.dispatcher import notification_dispatcher
from .models import User
from .serializers import (
    AgentApplicationDecisionSerializer,
    AgentApplicationSerializer,
    AuthTokenResponseSerializer,
    ChangePasswordSerializer,
    LoginSerializer,
    PublicAgentSerializer,
    SignupSerializer,
    UserProfileUpdateSerializer,
    UserSerializer,
)
from .services.token_service import token_service

logger = logging.getLogger(__name__)


def _token_response(user, status_code=status.HTTP_200_OK):
    return Response(
        {'token': token_service.issue_token(user), 'user': UserSerializer(user).data},
        status=status_code,
    )


@extend_schema(
    summary="Sign up",
    description="Create a regular user account and return an access token",
    request=SignupSerializer,
    responses={201: AuthTokenResponseSerializer, 400: OpenApiResponse(description="Bad Request")},
    tags=['Authentication']
)
@api_view(['POST'])
@permission_classes([AllowAny])
def signup(request):
    serializer = SignupSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info(f"New user signed up: {user.email}")
    return _token_response(user, status.HTTP_201_CREATED)


@extend_schema(
    summary="Log in",
    request=LoginSerializer,
    responses={200: AuthTokenResponseSerializer, 401: OpenApiResponse(description="Incorrect credentials")},
    tags=['Authentication']
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = LoginSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    user = serializer.validated_data['user']
    if user is None:
        raise Unauthorized('Incorrect email or password')
    return _token_response(user)


@extend_schema(
    summary="Current user",
    description="Retrieve, update or deactivate the authenticated user's profile",
    request=UserProfileUpdateSerializer,
    responses={
        200: UserSerializer,
        204: OpenApiResponse(description="Account deactivated"),
        401: OpenApiResponse(description="Unauthorized")
    },
    tags=['Authentication']
)
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def me(request):
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    if request.method == 'DELETE':
        request.user.is_active = False
        request.user.save(update_fields=['is_active', 'updated_at'])
        logger.info(f"User {request.user.email} deactivated their account")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UserProfileUpdateSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(UserSerializer(request.user).data)


@extend_schema(
    summary="Change password",
    request=ChangePasswordSerializer,
    responses={200: AuthTokenResponseSerializer, 401: OpenApiResponse(description="Current password is wrong")},
    tags=['Authentication']
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_password(request):
    serializer = ChangePasswordSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    if not user.check_password(serializer.validated_data['current_password']):
        raise Unauthorized('Your current password is wrong.')

    user.set_password(serializer.validated_data['new_password'])
    # Back-dated so the token issued below is still accepted
    user.password_changed_at = timezone.now() - timedelta(seconds=1)
    user.save(update_fields=['password', 'password_changed_at', 'updated_at'])
    return _token_response(user)


@extend_schema(
    summary="Apply to become an agent",
    request=AgentApplicationSerializer,
    responses={200: UserSerializer, 400: OpenApiResponse(description="Already an agent or pending")},
    tags=['Agents']
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def apply_agent(request):
    user = request.user
    if user.role != USER_ROLE_USER:
        raise InvalidState('Only regular users can apply to become agents.')
    if user.agent_status == AGENT_STATUS_PENDING:
        raise InvalidState('Your agent application is already pending review.')

    serializer = AgentApplicationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    for field, value in serializer.validated_data.items():
        setattr(user, field, value)
    user.agent_status = AGENT_STATUS_PENDING
    user.save()

    logger.info(f"Agent application submitted by {user.email}")
    return Response(UserSerializer(user).data)


@extend_schema(
    summary="Review agent application",
    description="Approve or reject a pending agent application (admin only)",
    request=AgentApplicationDecisionSerializer,
    responses={200: UserSerializer, 400: OpenApiResponse(description="No pending application")},
    tags=['Agents']
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdmin])
def review_agent_application(request, user_id):
    applicant = get_object_or_404(User, id=user_id)
    if applicant.agent_status != AGENT_STATUS_PENDING:
        raise InvalidState('This user has no pending agent application.')

    serializer = AgentApplicationDecisionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    decision = serializer.validated_data['decision']

    if decision == 'approve':
        applicant.role = USER_ROLE_AGENT
        applicant.agent_status = AGENT_STATUS_APPROVED
        title = 'Agent application approved'
        message = 'Congratulations! You can now list properties and manage bookings.'
    else:
        applicant.agent_status = AGENT_STATUS_REJECTED
        title = 'Agent application rejected'
        reason = serializer.validated_data.get('reason')
        message = f'Your agent application was not approved. {reason}'.strip() if reason else \
            'Your agent application was not approved.'
    applicant.save(update_fields=['role', 'agent_status', 'updated_at'])

    notification_dispatcher.notify_user(
        applicant,
        title=title,
        message=message,
        notification_type='system',
        related_object=applicant,
        is_important=True,
    )
    logger.info(f"Agent application for {applicant.email} {decision}d by {request.user.email}")
    return Response(UserSerializer(applicant).data)


@extend_schema(
    summary="List users",
    description="List all users (admin only)",
    parameters=[
        OpenApiParameter('role', str, description='Filter by role'),
        OpenApiParameter('agent_status', str, description='Filter by agent application status'),
    ],
    responses={200: UserSerializer(many=True)},
    tags=['Authentication']
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def list_users(request):
    queryset = User.objects.all()
    role = request.query_params.get('role')
    if role:
        queryset = queryset.filter(role=role)
    agent_status = request.query_params.get('agent_status')
    if agent_status:
        queryset = queryset.filter(agent_status=agent_status)

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(UserSerializer(page, many=True).data)


def _agents_queryset():
    return User.objects.filter(
        role=USER_ROLE_AGENT,
        agent_status=AGENT_STATUS_APPROVED,
        is_active=True,
    ).annotate(
        listing_count=Count(
            'listed_properties',
            filter=Q(listed_properties__is_active=True, listed_properties__status=PROPERTY_STATUS_AVAILABLE),
        )
    )


@extend_schema(
    summary="List agents",
    description="Public directory of approved agents",
    responses={200: PublicAgentSerializer(many=True)},
    tags=['Agents']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def list_agents(request):
    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(_agents_queryset().order_by('name'), request)
    return paginator.get_paginated_response(PublicAgentSerializer(page, many=True).data)


@extend_schema(
    summary="Agent profile",
    responses={200: PublicAgentSerializer, 404: OpenApiResponse(description="Agent not found")},
    tags=['Agents']
)
@api_view(['GET'])
@permission_classes([AllowAny])
def get_agent(request, agent_id):
    agent = get_object_or_404(_agents_queryset(), id=agent_id)
    return Response(PublicAgentSerializer(agent).data)
