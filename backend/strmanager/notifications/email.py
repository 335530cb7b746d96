import logging

import requests
from flask import current_app

from ..errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class ResendClient:
    """Thin client for the Resend transactional email HTTP API."""

    def __init__(self, api_key, api_url="https://api.resend.com/emails", timeout=10, session=None):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, sender, to, subject, html, text=None):
        if not self.api_key:
            raise EmailDeliveryError("RESEND_API_KEY is not configured")

        payload = {"from": sender, "to": list(to), "subject": subject, "html": html}
        if text:
            payload["text"] = text

        try:
            resp = self.session.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise EmailDeliveryError(str(exc)) from exc

        if resp.status_code >= 400:
            raise EmailDeliveryError(f"resend returned {resp.status_code}: {resp.text[:200]}")

        data = resp.json() if resp.content else {}
        logger.info("email sent id=%s to=%d subject=%r", data.get("id"), len(payload["to"]), subject)
        return data


def get_email_client():
    return current_app.extensions["email"]
