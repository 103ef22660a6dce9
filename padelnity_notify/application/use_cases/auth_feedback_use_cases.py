"""Turn auth provider outcomes into user-facing toasts.

The provider is an opaque request/response service; these use cases only
decide which toast the user sees and enforce the resubmit cooldowns.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Literal, Optional, Tuple

from padelnity_notify.application.use_cases.toast_use_cases import Notifier
from padelnity_notify.domain.ports.auth_provider import AuthResult, IAuthProvider


logger = logging.getLogger(__name__)

AuthStage = Literal["sign_up", "resend", "verify_otp", "sign_in", "reset_password", "update_password"]
AuthFailureKind = Literal[
    "already_registered",
    "weak_password",
    "invalid_email",
    "rate_limited",
    "invalid_code",
    "invalid_credentials",
    "email_not_confirmed",
    "same_password",
    "unknown",
]

# (severity, title, description)
ToastCopy = Tuple[str, str, str]

_ALREADY_REGISTERED = (
    "already registered",
    "email address is already registered",
    "already exists",
)
_RATE_LIMITED = ("rate_limit", "too many requests", "for security purposes")
_TOO_MANY = ("error", "Demasiados intentos", "Espera unos minutos antes de intentar de nuevo")

FAILURE_COPY: Dict[Tuple[AuthStage, AuthFailureKind], ToastCopy] = {
    ("sign_up", "already_registered"): (
        "info",
        "¡Ya tienes una cuenta!",
        "Este email ya está registrado. ¿Quieres iniciar sesión en su lugar?",
    ),
    ("sign_up", "weak_password"): ("error", "Contraseña muy débil", "Tu contraseña necesita ser más segura"),
    ("sign_up", "invalid_email"): ("error", "Email inválido", "Por favor verifica tu dirección de email"),
    ("sign_up", "rate_limited"): _TOO_MANY,
    ("sign_up", "unknown"): ("error", "No se pudo crear la cuenta", "Inténtalo de nuevo en unos segundos"),
    ("resend", "rate_limited"): _TOO_MANY,
    ("resend", "unknown"): ("error", "No se pudo reenviar el email", "Inténtalo más tarde"),
    ("verify_otp", "invalid_code"): ("error", "Código incorrecto", "Verifica el código o solicita uno nuevo"),
    ("verify_otp", "unknown"): ("error", "No se pudo verificar", "Inténtalo de nuevo o solicita un nuevo código"),
    ("sign_in", "invalid_credentials"): ("error", "Credenciales incorrectas", "Verifica tu email y contraseña"),
    ("sign_in", "email_not_confirmed"): (
        "error",
        "Cuenta no verificada",
        "Revisa tu email y verifica tu cuenta antes de continuar",
    ),
    ("sign_in", "rate_limited"): _TOO_MANY,
    ("sign_in", "unknown"): ("error", "No se pudo iniciar sesión", "Verifica tus datos e inténtalo de nuevo"),
    ("reset_password", "rate_limited"): _TOO_MANY,
    ("reset_password", "unknown"): ("error", "No se pudo enviar", "Inténtalo de nuevo en unos segundos"),
    ("update_password", "same_password"): (
        "error",
        "Contraseña repetida",
        "La nueva contraseña debe ser diferente a la actual",
    ),
    ("update_password", "weak_password"): ("error", "Contraseña muy débil", "Tu contraseña necesita ser más segura"),
    ("update_password", "unknown"): ("error", "No se pudo cambiar", "Inténtalo de nuevo en unos segundos"),
}

TEMPORARY_ERROR: ToastCopy = ("error", "Error temporal", "Inténtalo de nuevo en unos segundos")
SIGN_UP_SENT: ToastCopy = ("success", "¡Código enviado!", "Revisa tu email para verificar tu cuenta")
MISSING_FIELDS: ToastCopy = ("error", "Faltan datos", "Completa todos los campos para continuar")
RESEND_SENT: ToastCopy = ("success", "Email reenviado", "Email de verificación reenviado correctamente")
RESEND_CHECK_INBOX: ToastCopy = ("info", "Revisa tu email", "Revisa tu bandeja de entrada y spam")
RESEND_CRASHED: ToastCopy = ("error", "Error al reenviar el email", "Inténtalo más tarde")
OTP_INCOMPLETE: ToastCopy = ("error", "Código incompleto", "Ingresa los 6 dígitos del código")
OTP_VERIFIED: ToastCopy = ("success", "¡Cuenta creada!", "Bienvenido a Padelnity")
OTP_CRASHED: ToastCopy = ("error", "Error de verificación", "Inténtalo de nuevo o solicita un nuevo código")
SIGN_IN_MISSING_FIELDS: ToastCopy = ("error", "Faltan datos", "Completa tu email y contraseña para continuar")
SIGNED_IN: ToastCopy = ("success", "¡Bienvenido de vuelta!", "Iniciando sesión...")
RESET_EMAIL_MISSING: ToastCopy = ("error", "Email requerido", "Ingresa tu email para continuar")
PASSWORD_FORM_INVALID: ToastCopy = ("error", "Revisa tu contraseña", "Por favor corrige los errores antes de continuar")
PASSWORD_UPDATED: ToastCopy = ("success", "¡Contraseña actualizada!", "Tu contraseña se ha cambiado exitosamente")

OTP_LENGTH = 6
MIN_PASSWORD_LENGTH = 6


def _rate_limited(text: str) -> bool:
    return any(s in text for s in _RATE_LIMITED)


def classify_auth_error(message: Optional[str], stage: AuthStage = "sign_up") -> AuthFailureKind:
    """Map a provider error message onto a failure kind for ``stage``.

    Matching is case-insensitive substring search; anything unrecognised is
    ``unknown`` so the caller still gets the stage's generic copy.
    """
    text = (message or "").lower()
    if stage == "verify_otp":
        if "invalid" in text or "expired" in text:
            return "invalid_code"
        return "unknown"
    if stage == "sign_in":
        if "invalid login credentials" in text:
            return "invalid_credentials"
        if "email not confirmed" in text:
            return "email_not_confirmed"
        return "rate_limited" if _rate_limited(text) else "unknown"
    if stage == "update_password":
        if "same password" in text:
            return "same_password"
        if "password should be at least" in text:
            return "weak_password"
        return "unknown"
    if stage in ("resend", "reset_password"):
        return "rate_limited" if _rate_limited(text) else "unknown"

    if any(s in text for s in _ALREADY_REGISTERED):
        return "already_registered"
    if "password should be at least" in text:
        return "weak_password"
    if "invalid email" in text:
        return "invalid_email"
    if _rate_limited(text):
        return "rate_limited"
    return "unknown"


def feedback_for(kind: AuthFailureKind, stage: AuthStage = "sign_up") -> ToastCopy:
    return FAILURE_COPY.get((stage, kind)) or FAILURE_COPY[(stage, "unknown")]


def cooldown_copy(remaining_seconds: int) -> ToastCopy:
    return ("error", "¡Calma!", f"Espera {remaining_seconds} segundos antes de intentar de nuevo")


def resend_cooldown_copy(remaining_seconds: int) -> ToastCopy:
    return ("error", "Espera un momento", f"Debes esperar {remaining_seconds} segundos antes de reenviar")


@dataclass
class SubmitCooldown:
    """Minimum gap between accepted submissions."""

    window_seconds: float = 10.0
    clock: Callable[[], float] = time.monotonic
    _last: Optional[float] = field(default=None, init=False)

    def remaining(self) -> int:
        """Whole seconds left before the next submission is allowed (0 when allowed)."""
        if self._last is None:
            return 0
        elapsed = self.clock() - self._last
        if elapsed >= self.window_seconds:
            return 0
        return math.ceil(self.window_seconds - elapsed)

    def mark(self) -> None:
        self._last = self.clock()

    def reset(self) -> None:
        self._last = None


def _show(notify: Notifier, copy: ToastCopy) -> None:
    severity, title, description = copy
    getattr(notify, severity)(title, description)


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


@dataclass(slots=True)
class SignUpWithFeedback:
    provider: IAuthProvider
    notify: Notifier
    cooldown: SubmitCooldown

    async def __call__(self, email: str, password: str) -> bool:
        remaining = self.cooldown.remaining()
        if remaining > 0:
            _show(self.notify, cooldown_copy(remaining))
            return False
        if _blank(email) or _blank(password):
            _show(self.notify, MISSING_FIELDS)
            return False

        self.cooldown.mark()
        try:
            result: AuthResult = await self.provider.sign_up_with_otp(email.strip(), password)
        except Exception as exc:  # noqa: BLE001
            logger.warning("sign-up request failed: %s", exc)
            _show(self.notify, TEMPORARY_ERROR)
            return False

        if not result.ok:
            kind = classify_auth_error(result.error_message, "sign_up")
            logger.info("sign-up rejected: kind=%s", kind)
            _show(self.notify, feedback_for(kind, "sign_up"))
            return False

        _show(self.notify, SIGN_UP_SENT)
        return True


@dataclass(slots=True)
class ResendVerificationWithFeedback:
    """Resend the sign-up code. A failed resend does not consume the cooldown."""

    provider: IAuthProvider
    notify: Notifier
    cooldown: SubmitCooldown

    async def __call__(self, email: str, password: str) -> bool:
        remaining = self.cooldown.remaining()
        if remaining > 0:
            _show(self.notify, resend_cooldown_copy(remaining))
            return False

        self.cooldown.mark()
        try:
            result: AuthResult = await self.provider.resend_sign_up_otp(email, password)
        except Exception as exc:  # noqa: BLE001
            logger.warning("verification resend failed: %s", exc)
            self.cooldown.reset()
            _show(self.notify, RESEND_CRASHED)
            return False

        if not result.ok:
            self.cooldown.reset()
            kind = classify_auth_error(result.error_message, "resend")
            _show(self.notify, feedback_for(kind, "resend"))
            return False

        _show(self.notify, RESEND_SENT)
        _show(self.notify, RESEND_CHECK_INBOX)
        return True


@dataclass(slots=True)
class VerifyOtpWithFeedback:
    provider: IAuthProvider
    notify: Notifier

    async def __call__(self, email: str, code: str) -> bool:
        code = (code or "").strip()
        if len(code) != OTP_LENGTH or not code.isdigit():
            _show(self.notify, OTP_INCOMPLETE)
            return False

        try:
            result: AuthResult = await self.provider.verify_otp(email, code)
        except Exception as exc:  # noqa: BLE001
            logger.warning("otp verification failed: %s", exc)
            _show(self.notify, OTP_CRASHED)
            return False

        if not result.ok:
            kind = classify_auth_error(result.error_message, "verify_otp")
            _show(self.notify, feedback_for(kind, "verify_otp"))
            return False

        if result.user:
            _show(self.notify, OTP_VERIFIED)
        return True


@dataclass(slots=True)
class SignInWithFeedback:
    provider: IAuthProvider
    notify: Notifier

    async def __call__(self, email: str, password: str) -> bool:
        if _blank(email) or _blank(password):
            _show(self.notify, SIGN_IN_MISSING_FIELDS)
            return False

        try:
            result: AuthResult = await self.provider.sign_in(email.strip(), password)
        except Exception as exc:  # noqa: BLE001
            logger.warning("sign-in request failed: %s", exc)
            _show(self.notify, TEMPORARY_ERROR)
            return False

        if not result.ok:
            kind = classify_auth_error(result.error_message, "sign_in")
            logger.info("sign-in rejected: kind=%s", kind)
            _show(self.notify, feedback_for(kind, "sign_in"))
            return False

        _show(self.notify, SIGNED_IN)
        return True


@dataclass(slots=True)
class RequestPasswordResetWithFeedback:
    """Ask the provider to mail a recovery code.

    Success is silent: the form moves on to the code entry step.
    """

    provider: IAuthProvider
    notify: Notifier

    async def __call__(self, email: str) -> bool:
        if _blank(email):
            _show(self.notify, RESET_EMAIL_MISSING)
            return False

        try:
            result: AuthResult = await self.provider.reset_password(email.strip())
        except Exception as exc:  # noqa: BLE001
            logger.warning("password reset request failed: %s", exc)
            _show(self.notify, feedback_for("unknown", "reset_password"))
            return False

        if not result.ok:
            kind = classify_auth_error(result.error_message, "reset_password")
            _show(self.notify, feedback_for(kind, "reset_password"))
            return False
        return True


@dataclass(slots=True)
class UpdatePasswordWithFeedback:
    provider: IAuthProvider
    notify: Notifier

    async def __call__(self, new_password: str, confirm_password: Optional[str] = None) -> bool:
        new_password = new_password or ""
        mismatch = confirm_password is not None and confirm_password != new_password
        if len(new_password) < MIN_PASSWORD_LENGTH or mismatch:
            _show(self.notify, PASSWORD_FORM_INVALID)
            return False

        try:
            result: AuthResult = await self.provider.update_password(new_password)
        except Exception as exc:  # noqa: BLE001
            logger.warning("password update failed: %s", exc)
            _show(self.notify, TEMPORARY_ERROR)
            return False

        if not result.ok:
            kind = classify_auth_error(result.error_message, "update_password")
            _show(self.notify, feedback_for(kind, "update_password"))
            return False

        _show(self.notify, PASSWORD_UPDATED)
        return True
