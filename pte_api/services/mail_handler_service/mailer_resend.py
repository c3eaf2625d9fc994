import asyncio
import logging
import os
from typing import Optional, List, Union, Dict, Any
from jinja2 import Environment, FileSystemLoader, select_autoescape
import resend
from pte_api.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)

resend.api_key = settings.RESEND_API_KEY


class EmailError(Exception):
    """Raised when Resend rejects or fails to send a message."""


async def send_email(
    subject: str,
    recipient: Union[str, List[str]],
    html_content: Optional[str] = None,
    text_content: Optional[str] = None,
    sender: Optional[str] = None,
    reply_to: Optional[str] = None,
    tags: Optional[Dict[str, str]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Send an email through the Resend SDK.

    Returns the Resend response, or None when no API key is configured
    (local development and tests).

    Raises:
        EmailError: If the send fails.
    """
    if not settings.RESEND_API_KEY:
        logger.warning(f"RESEND_API_KEY not set; skipping email '{subject}'")
        return None

    params: resend.Emails.SendParams = {
        "from": sender or settings.RESEND_FROM_EMAIL,
        "to": [recipient] if isinstance(recipient, str) else recipient,
        "subject": subject,
    }
    if html_content:
        params["html"] = html_content
    if text_content:
        params["text"] = text_content
    if reply_to:
        params["reply_to"] = [reply_to]
    if tags:
        params["tags"] = [{"name": k, "value": v} for k, v in tags.items()]

    try:
        response = await asyncio.to_thread(resend.Emails.send, params)
    except Exception as e:
        if hasattr(e, "status_code"):
            raise EmailError(f"Resend API error ({e.status_code}): {e}") from e
        raise EmailError(f"Failed to send email: {e}") from e

    if not response or not response.get("id"):
        raise EmailError("Invalid response from Resend API - no email ID returned")
    return response


def _render(template: str, **context) -> str:
    return env.get_template(template).render(
        app_name=settings.APP_NAME,
        support_email=settings.SUPPORT_EMAIL,
        logo_url=settings.LOGO,
        **context,
    )


# template, subject, what the code is for, reassurance line
CODE_EMAILS = {
    "verification": (
        "verification.html",
        "Verify your {app} account",
        "verification",
        "If you didn't create an account, ignore this email.",
    ),
    "password-reset": (
        "reset_password.html",
        "Reset your {app} password",
        "password reset",
        "If you didn't request a reset, your password stays unchanged.",
    ),
}


async def _send_code_email(kind: str, email: str, code: str, name: str) -> Optional[Dict[str, Any]]:
    template, subject, purpose, footnote = CODE_EMAILS[kind]
    minutes = settings.OTP_INTERVAL_SECONDS // 60
    text = (
        f"{settings.APP_NAME} - {purpose.capitalize()}\n\n"
        f"Your {purpose} code is: {code}\n\n"
        f"This code expires in {minutes} minutes. {footnote}\n\n"
        f"Need help? Contact us at {settings.SUPPORT_EMAIL}"
    )
    return await send_email(
        subject=subject.format(app=settings.APP_NAME),
        recipient=email,
        html_content=_render(template, code=code, name=name, minutes=minutes),
        text_content=text,
        tags={"type": kind},
    )


async def send_verification_email(email: str, code: str, name: str) -> Optional[Dict[str, Any]]:
    return await _send_code_email("verification", email, code, name)


async def send_reset_password_email(email: str, code: str, name: str) -> Optional[Dict[str, Any]]:
    return await _send_code_email("password-reset", email, code, name)


async def send_welcome_email(email: str, name: str) -> Optional[Dict[str, Any]]:
    text = (
        f"Welcome to {settings.APP_NAME}, {name}!\n\n"
        "Your email is verified. Start with a free diagnostic mock test to find your baseline score.\n\n"
        f"Need help? Contact us at {settings.SUPPORT_EMAIL}"
    )
    return await send_email(
        subject=f"Welcome to {settings.APP_NAME}!",
        recipient=email,
        html_content=_render("welcome.html", name=name),
        text_content=text,
        tags={"type": "welcome"},
    )
