"""
Caller identity for the API.

Token and session verification happen upstream (gateway); by the time a
request reaches this service it carries the verified caller's id and role in
``X-Caller-Id`` / ``X-Caller-Role``.
"""
from dataclasses import dataclass

from rest_framework import authentication, exceptions

ROLE_ADMIN = 'admin'
ROLE_SUPERADMIN = 'superadmin'
ROLE_OPERATOR = 'operator'

ROLE_CHOICES = (ROLE_ADMIN, ROLE_SUPERADMIN, ROLE_OPERATOR)


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller as handed over by the auth layer."""
    id: int
    role: str

    is_authenticated = True
    is_anonymous = False

    @property
    def is_admin(self):
        return self.role in (ROLE_ADMIN, ROLE_SUPERADMIN)

    @property
    def is_operator(self):
        return self.role == ROLE_OPERATOR

    def __str__(self):
        return f"{self.role}:{self.id}"


class CallerHeaderAuthentication(authentication.BaseAuthentication):
    """Builds a ``CallerIdentity`` from the forwarded identity headers."""

    id_header = 'HTTP_X_CALLER_ID'
    role_header = 'HTTP_X_CALLER_ROLE'

    def authenticate(self, request):
        raw_id = request.META.get(self.id_header)
        if not raw_id:
            return None

        role = request.META.get(self.role_header, ROLE_OPERATOR).strip().lower()
        if role not in ROLE_CHOICES:
            raise exceptions.AuthenticationFailed(f"Unknown caller role '{role}'.")

        try:
            caller_id = int(raw_id)
        except ValueError:
            raise exceptions.AuthenticationFailed("X-Caller-Id must be an integer.")

        return CallerIdentity(id=caller_id, role=role), None

    def authenticate_header(self, request):
        return 'X-Caller-Id'
