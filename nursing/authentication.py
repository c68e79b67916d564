"""
Bearer JWT authentication for nurses.

The token only carries the nurse primary key (``id``) and role. The nurse
row is reloaded on every request so that deactivating a nurse takes
effect immediately: an inactive nurse holding a valid token gets 403,
not 401, because the credentials themselves are fine.
"""
from __future__ import annotations

from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.settings import api_settings

from nursing.models import Nurse

INACTIVE_MESSAGE = 'Your account is inactive. Please contact the administrator.'


class NurseJWTAuthentication(JWTAuthentication):

    def get_user(self, validated_token):
        try:
            nurse_pk = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError:
            raise InvalidToken('Token contained no recognizable user identification')

        nurse = Nurse.objects.filter(**{api_settings.USER_ID_FIELD: nurse_pk}).first()
        if nurse is None:
            raise AuthenticationFailed('Nurse not found', code='user_not_found')
        if not nurse.is_active:
            raise PermissionDenied(INACTIVE_MESSAGE)
        return nurse
