from rest_framework.permissions import BasePermission
from django.conf import settings

class HasInternalAPIToken(BasePermission):
    """관리용 엔드포인트: X-Internal-Token 헤더가 API_INTERNAL_TOKEN 과 같아야 한다."""

    def has_permission(self, request, view):
        expected = getattr(settings, 'API_INTERNAL_TOKEN', None)
        got = request.headers.get('X-Internal-Token')
        return bool(expected) and got == expected
