"""Tasks for the accounts app."""

import structlog
from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string

from common.tasks import send_email

logger = structlog.get_logger(__name__)


@shared_task
def send_verification_email(email: str, token: str) -> None:
    """Send a verification email."""
    subject = render_to_string("accounts/emails/email_verification_subject.txt").strip()
    verification_link = f"{settings.FRONTEND_BASE_URL}/verify-email?token={token}"
    context = {"verification_link": verification_link, "site_name": settings.SITE_NAME}
    body = render_to_string("accounts/emails/email_verification_body.txt", context)
    html_body = render_to_string("accounts/emails/email_verification_body.html", context)
    send_email(to=email, subject=subject, body=body, html_body=html_body)
    logger.info("verification_email_sent")


@shared_task
def send_password_reset_link(email: str, token: str) -> None:
    """Send a password reset email."""
    subject = render_to_string("accounts/emails/password_reset_subject.txt").strip()
    password_reset_link = f"{settings.FRONTEND_BASE_URL}/reset-password?token={token}"
    context = {"password_reset_link": password_reset_link, "site_name": settings.SITE_NAME}
    body = render_to_string("accounts/emails/password_reset_body.txt", context)
    html_body = render_to_string("accounts/emails/password_reset_body.html", context)
    send_email(to=email, subject=subject, body=body, html_body=html_body)
    logger.info("password_reset_email_sent")


@shared_task
def send_temporary_password(email: str, temporary_password: str) -> None:
    """Send the temporary password set by an administrator."""
    subject = render_to_string("accounts/emails/temporary_password_subject.txt").strip()
    context = {
        "temporary_password": temporary_password,
        "login_link": f"{settings.FRONTEND_BASE_URL}/login",
        "site_name": settings.SITE_NAME,
    }
    body = render_to_string("accounts/emails/temporary_password_body.txt", context)
    html_body = render_to_string("accounts/emails/temporary_password_body.html", context)
    send_email(to=email, subject=subject, body=body, html_body=html_body)
    logger.info("temporary_password_email_sent")
