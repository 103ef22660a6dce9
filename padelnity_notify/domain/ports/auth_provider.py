from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol


@dataclass(frozen=True, slots=True)
class AuthResult:
    ok: bool
    error_message: Optional[str] = None
    user: Optional[Mapping[str, Any]] = None


class IAuthProvider(Protocol):
    async def sign_up_with_otp(self, email: str, password: str) -> AuthResult:  # noqa: D401
        """Start sign-up; the provider mails a one-time code on success."""
        ...

    async def resend_sign_up_otp(self, email: str, password: str) -> AuthResult:
        """Mail a fresh verification code for a pending sign-up."""
        ...

    async def verify_otp(self, email: str, code: str) -> AuthResult: ...

    async def sign_in(self, email: str, password: str) -> AuthResult: ...

    async def reset_password(self, email: str) -> AuthResult:
        """Mail a password recovery code."""
        ...

    async def update_password(self, new_password: str) -> AuthResult: ...
