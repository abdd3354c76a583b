"""Caller identity.

Sessions are issued upstream; by the time a request reaches this service
the auth gateway has verified it and forwarded the user as headers. An
absent ``X-User-Id`` means the caller is not signed in.
"""

from dataclasses import dataclass

from fastapi import Header

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = "buyer"
    name: str | None = None
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == ADMIN_ROLE


def current_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str = Header(default="buyer"),
    x_user_name: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
) -> Principal | None:
    if not x_user_id or not x_user_id.strip():
        return None
    return Principal(
        user_id=x_user_id.strip(),
        role=x_user_role or "buyer",
        name=x_user_name,
        email=x_user_email,
    )
