"""Utility functions for the application."""

from __future__ import annotations

import smtplib
from typing import Any, Protocol

from flask import current_app, jsonify, render_template
from flask_mail import Message

from .core.constants import SMTP_AUTH_ERROR_CODE
from .core.types import APIResponse
from .extensions import mail


class EmailError(Exception):
    """Base class for email errors."""

    pass


def send_email(to, subject, template, **kwargs):
    """Send an email to a recipient.

    Raises:
        EmailError: If sending the email fails.
    """
    try:
        msg = Message(
            subject,
            recipients=[to],
            html=render_template(template, **kwargs),
            sender=current_app.config["MAIL_DEFAULT_SENDER"],
        )
        mail.send(msg)
    except smtplib.SMTPAuthenticationError as e:
        if e.smtp_code == SMTP_AUTH_ERROR_CODE:
            raise EmailError(
                "Authentication failed. The mail provider requires an App Password. "
                "Please verify your MAIL_USERNAME and MAIL_PASSWORD settings."
            ) from e
        raise EmailError(f"SMTP Authentication failed: {e}") from e
    except Exception as e:
        raise EmailError(f"Failed to send email: {e}") from e


class EmailSender(Protocol):
    """Capability for sending templated emails; raises EmailError on failure."""

    def send(self, to: str, subject: str, template: str, **context: Any) -> None: ...


class MailEmailSender:
    """Sends templated emails through Flask-Mail."""

    def send(self, to: str, subject: str, template: str, **context: Any) -> None:
        """Render the template and deliver it."""
        send_email(to, subject, template, **context)


def api_response(data=None, message="", status_code=200):
    """Wrap a payload in the standard success envelope."""
    body = APIResponse(success=True, message=message, data=data)
    return jsonify(body), status_code
