from __future__ import annotations

from functools import lru_cache

from padelnity_notify.config import settings
from padelnity_notify.application.toasts.engine import ToastEngine
from padelnity_notify.application.use_cases.auth_feedback_use_cases import (
    RequestPasswordResetWithFeedback,
    ResendVerificationWithFeedback,
    SignInWithFeedback,
    SignUpWithFeedback,
    SubmitCooldown,
    UpdatePasswordWithFeedback,
    VerifyOtpWithFeedback,
)
from padelnity_notify.application.use_cases.toast_use_cases import Notifier
from padelnity_notify.domain.ports.auth_provider import IAuthProvider
from padelnity_notify.domain.ports.notification_sink import INotificationSink
from padelnity_notify.infrastructure.metrics.metrics import PrometheusToastListener
from padelnity_notify.infrastructure.overlay.notification_sink_impl import (
    LoggingNotificationSink,
    OverlayNotificationSink,
)


@lru_cache(maxsize=1)
def overlay_sink() -> OverlayNotificationSink:
    return OverlayNotificationSink()


@lru_cache(maxsize=1)
def notification_sink() -> INotificationSink:
    if settings.toast_sink.strip().lower() == "log":
        return LoggingNotificationSink()
    return overlay_sink()


@lru_cache(maxsize=1)
def toast_engine() -> ToastEngine:
    return ToastEngine.from_settings(notification_sink(), settings, listener=PrometheusToastListener())


@lru_cache(maxsize=1)
def notify() -> Notifier:
    return Notifier(toast_engine())


# Auth feedback use-cases: one instance per form, so each keeps its own cooldown
def sign_up_with_feedback(provider: IAuthProvider) -> SignUpWithFeedback:
    return SignUpWithFeedback(
        provider=provider,
        notify=notify(),
        cooldown=SubmitCooldown(window_seconds=float(settings.submit_cooldown_sec)),
    )


def verify_otp_with_feedback(provider: IAuthProvider) -> VerifyOtpWithFeedback:
    return VerifyOtpWithFeedback(provider=provider, notify=notify())


def resend_verification_with_feedback(provider: IAuthProvider) -> ResendVerificationWithFeedback:
    return ResendVerificationWithFeedback(
        provider=provider,
        notify=notify(),
        cooldown=SubmitCooldown(window_seconds=float(settings.resend_cooldown_sec)),
    )


def sign_in_with_feedback(provider: IAuthProvider) -> SignInWithFeedback:
    return SignInWithFeedback(provider=provider, notify=notify())


def request_password_reset_with_feedback(provider: IAuthProvider) -> RequestPasswordResetWithFeedback:
    return RequestPasswordResetWithFeedback(provider=provider, notify=notify())


def update_password_with_feedback(provider: IAuthProvider) -> UpdatePasswordWithFeedback:
    return UpdatePasswordWithFeedback(provider=provider, notify=notify())
