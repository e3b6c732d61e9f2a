"""
Outbound notifications.

Bodies are rendered from Jinja2 templates. Delivery goes through a mail relay
over HTTP when one is configured, otherwise notifications are only logged.
"""

from typing import Any, Protocol

import requests
from jinja2 import DictLoader, Environment, select_autoescape

from deckshare.config import LOGGER, Settings

SUBJECT = "[deckshare] New comment"

TEMPLATES = {
    "newcomment_author": (
        "<p>Hi,</p>\n"
        "<p><b>{{ username }}</b> commented on your decklist "
        '<a href="{{ url }}">{{ decklist_name }}</a>:</p>\n'
        "<blockquote>{{ comment|safe }}</blockquote>\n"
        '<p><small>You receive this email because you are the author of this decklist. '
        'Change your notification settings on <a href="{{ profile }}">your profile</a>.</small></p>\n'
    ),
    "newcomment_commenter": (
        "<p>Hi,</p>\n"
        "<p><b>{{ username }}</b> commented on the decklist "
        '<a href="{{ url }}">{{ decklist_name }}</a>:</p>\n'
        "<blockquote>{{ comment|safe }}</blockquote>\n"
        "<p><small>You receive this email because you commented on this decklist. "
        'Change your notification settings on <a href="{{ profile }}">your profile</a>.</small></p>\n'
    ),
    "newcomment_mentioned": (
        "<p>Hi,</p>\n"
        "<p><b>{{ username }}</b> mentioned you in a comment on the decklist "
        '<a href="{{ url }}">{{ decklist_name }}</a>:</p>\n'
        "<blockquote>{{ comment|safe }}</blockquote>\n"
        "<p><small>You receive this email because you were mentioned. "
        'Change your notification settings on <a href="{{ profile }}">your profile</a>.</small></p>\n'
    ),
}

_environment = Environment(
    loader=DictLoader(TEMPLATES),
    autoescape=select_autoescape(default=True, default_for_string=True),
)


def render_notification(template_ref: str, data: dict[str, Any]) -> str:
    return _environment.get_template(template_ref).render(**data)


class Notifier(Protocol):
    def send(self, to_address: str, template_ref: str, data: dict[str, Any]) -> None: ...


class LoggingNotifier:
    """Notifier used when no mail relay is configured."""

    def send(self, to_address: str, template_ref: str, data: dict[str, Any]) -> None:
        body = render_notification(template_ref, data)
        LOGGER.info(f"Notification '{template_ref}' for {to_address} ({len(body)} bytes)")
        LOGGER.debug(body)


class MailRelayNotifier:
    """Posts rendered emails to an HTTP mail relay."""

    def __init__(self, relay_url: str, sender_address: str, timeout: int = 10) -> None:
        self.relay_url = relay_url
        self.sender_address = sender_address
        self.timeout = timeout

    def send(self, to_address: str, template_ref: str, data: dict[str, Any]) -> None:
        payload = {
            "from": {"email": self.sender_address, "name": data.get("username")},
            "to": to_address,
            "subject": SUBJECT,
            "html": render_notification(template_ref, data),
        }
        response = requests.post(self.relay_url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        LOGGER.info(f"Notification '{template_ref}' sent to {to_address}")


def build_notifier(settings: Settings) -> Notifier:
    if settings.mail_relay_url:
        return MailRelayNotifier(
            settings.mail_relay_url,
            settings.email_sender_address,
            timeout=settings.mail_timeout,
        )
    return LoggingNotifier()
