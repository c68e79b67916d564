"""
Nurse account endpoints: signup, login, token refresh/logout and status.

Kept apart from ``nursing.authentication`` so that DRF can import the
authentication class during start-up without pulling in the views.
"""
from __future__ import annotations

from django.contrib.auth.models import update_last_login
from django.db import transaction
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from nursing.authentication import INACTIVE_MESSAGE
from nursing.exceptions import RecordNotFound
from nursing.models import Nurse
from nursing.permissions import IsHeadNurse
from nursing.serializers.auth import LoginSerializer, SignupSerializer, StatusSerializer, nurse_summary
from nursing.services.audit import log_action


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


def issue_tokens(nurse: Nurse) -> dict:
    refresh = RefreshToken.for_user(nurse)
    refresh['role'] = nurse.role
    return {'token': str(refresh.access_token), 'refresh': str(refresh)}


# ---------------------------------------------------------------------
# Signup / login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def signup_view(request):
    s = SignupSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        nurse = Nurse.objects.create_user(
            vd['email'], vd['password'],
            name=vd['name'], role=vd['role'], department=vd['department'],
        )
    log_action(nurse=nurse, action='nurse_signup', object_type='nurse', object_id=nurse.id)
    return Response({'ok': True, 'message': 'Nurse registered successfully!', 'nurse': nurse_summary(nurse)}, status=201)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data['email']
    password = s.validated_data['password']
    ip = request.META.get('REMOTE_ADDR')

    nurse = Nurse.objects.filter(email__iexact=email).first()
    if nurse is None or not nurse.check_password(password):
        log_action(nurse=None, action='login', object_type='nurse', detail={'result': 'fail', 'email': email, 'ip': ip})
        return Response({'ok': False, 'error': {'code': 'invalid_credentials', 'message': 'Invalid credentials'}}, status=400)

    if not nurse.is_active:
        log_action(nurse=nurse, action='login', object_type='nurse', object_id=nurse.id, detail={'result': 'inactive', 'ip': ip})
        return Response({
            'ok': False,
            'error': {'code': 'permission_denied', 'message': INACTIVE_MESSAGE},
            'nurse': nurse_summary(nurse),
        }, status=403)

    update_last_login(None, nurse)
    log_action(nurse=nurse, action='login', object_type='nurse', object_id=nurse.id, detail={'result': 'ok', 'ip': ip})
    return Response({'ok': True, 'message': 'Login successful!', 'nurse': nurse_summary(nurse), **issue_tokens(nurse)})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    """Return a new access token for a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    data = dict(s.validated_data)
    return Response({'ok': True, 'token': data.pop('access'), **data})


@api_view(['POST'])
def logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the nurse."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            raise ValidationError({'refresh': str(e)})
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    log_action(nurse=request.user, action='logout', object_type='nurse', object_id=request.user.id, detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})


# ---------------------------------------------------------------------
# Status management
# ---------------------------------------------------------------------
@api_view(['PATCH'])
@permission_classes([IsHeadNurse])
def status_view(request, pk: int):
    s = StatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    nurse = Nurse.objects.filter(pk=pk).first()
    if nurse is None:
        raise RecordNotFound('Nurse not found')
    new_status = s.validated_data['status']
    nurse.status = new_status
    nurse.save(update_fields=['status'])
    log_action(nurse=request.user, action='nurse_status', object_type='nurse', object_id=nurse.id, detail={'status': new_status})
    return Response({
        'ok': True,
        'message': f"Nurse status updated to '{new_status}' successfully.",
        'nurse': nurse_summary(nurse),
    })
