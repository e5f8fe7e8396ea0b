"""
Transactional e-mail through the Postmark HTTP API.

``NotificationService.send(template, recipient, data)`` renders one of the
named templates and posts it; any transport failure or non-2xx answer
raises :class:`EmailSendError`.  Without ``POSTMARK_API_TOKEN`` the service
runs in simulated mode: nothing leaves the process, the send is logged.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from decimal import Decimal
from string import Template
from typing import Any

import httpx
from fastapi import Request

from afrisoutien.core.config import settings
from afrisoutien.core.exceptions import EmailSendError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailTemplate:
    subject: Template
    html: Template
    text: Template


def _layout(body: str) -> str:
    return (
        '<!DOCTYPE html><html lang="fr"><head><meta charset="UTF-8"></head>'
        '<body style="margin:0;padding:0;background-color:#F5F5F5;font-family:Arial,sans-serif;">'
        '<table width="600" align="center" style="background-color:#FFFFFF;">'
        '<tr><td align="center" style="padding:30px 20px;background-color:#00402E;">'
        '<h2 style="color:#FFFFFF;margin:0;">AFRI SOUTIEN</h2></td></tr>'
        f'<tr><td style="padding:40px 30px;color:#555555;">{body}</td></tr>'
        '<tr><td style="padding:30px;background-color:#00402E;color:#FFFFFF;text-align:center;">'
        "<strong>Afri Soutien</strong> - Plateforme de solidarité pan-africaine"
        "</td></tr></table></body></html>"
    )


TEMPLATES: dict[str, EmailTemplate] = {
    "welcome_verification": EmailTemplate(
        subject=Template("Bienvenue sur Afri Soutien - Vérifiez votre compte"),
        html=Template(
            _layout(
                "<h1>Bienvenue !</h1>"
                "<p>Pour finaliser votre inscription, confirmez votre adresse email.</p>"
                '<p><a href="$verification_url">Vérifier mon adresse e-mail</a></p>'
            )
        ),
        text=Template(
            "Bienvenue sur Afri Soutien ! Pour vérifier votre compte, "
            "visitez ce lien : $verification_url"
        ),
    ),
    "password_reset": EmailTemplate(
        subject=Template("Votre demande de réinitialisation de mot de passe"),
        html=Template(
            _layout(
                "<h1>Réinitialisation du mot de passe</h1>"
                "<p>Cliquez sur le lien ci-dessous pour choisir un nouveau mot de passe.</p>"
                '<p><a href="$reset_url">Réinitialiser mon mot de passe</a></p>'
                "<p>Si vous n'êtes pas à l'origine de cette demande, ignorez cet email.</p>"
            )
        ),
        text=Template(
            "Pour réinitialiser votre mot de passe Afri Soutien, visitez ce lien : $reset_url"
        ),
    ),
    "donation_receipt": EmailTemplate(
        subject=Template('Merci pour votre don à la cagnotte "$campaign_title" !'),
        html=Template(
            _layout(
                "<h1>Merci $donor_name !</h1>"
                "<p>Votre don de <strong>$amount FCFA</strong> pour la cagnotte "
                "<strong>$campaign_title</strong> a bien été reçu.</p>"
                "<p>Numéro de reçu : <strong>$receipt_number</strong></p>"
            )
        ),
        text=Template(
            "Merci $donor_name ! Votre don de $amount FCFA pour \"$campaign_title\" "
            "a bien été reçu. Reçu n° $receipt_number."
        ),
    ),
    "campaign_owner_donation": EmailTemplate(
        subject=Template('Nouveau don pour votre cagnotte "$campaign_title"'),
        html=Template(
            _layout(
                "<h1>Bonne nouvelle !</h1>"
                "<p>$donor_name a donné <strong>$amount FCFA</strong> à votre cagnotte "
                "<strong>$campaign_title</strong>.</p>"
            )
        ),
        text=Template("$donor_name a donné $amount FCFA à votre cagnotte \"$campaign_title\"."),
    ),
    "contact_form": EmailTemplate(
        subject=Template("[Contact] $subject"),
        html=Template(
            _layout(
                "<h1>Nouveau message de contact</h1>"
                "<p><strong>De :</strong> $sender_name &lt;$sender_email&gt;</p>"
                "<p><strong>Sujet :</strong> $subject</p>"
                "<p>$message</p>"
            )
        ),
        text=Template("De : $sender_name <$sender_email>\nSujet : $subject\n\n$message"),
    ),
    "contact_acknowledgment": EmailTemplate(
        subject=Template("Nous avons bien reçu votre message - Afri Soutien"),
        html=Template(
            _layout(
                "<h1>Merci $sender_name</h1>"
                "<p>Nous avons bien reçu votre message « $subject » et vous "
                "répondrons dans les plus brefs délais.</p>"
            )
        ),
        text=Template(
            "Merci $sender_name, nous avons bien reçu votre message \"$subject\" "
            "et vous répondrons dans les plus brefs délais."
        ),
    ),
}


def _format_amount(amount: Decimal | float | int) -> str:
    return f"{Decimal(str(amount)):,.0f}".replace(",", " ")


class NotificationService:
    def __init__(
        self,
        api_token: str | None,
        *,
        api_url: str = settings.POSTMARK_API_URL,
        from_email: str = settings.FROM_EMAIL,
        contact_email: str = settings.CONTACT_EMAIL,
        frontend_url: str = settings.FRONTEND_URL,
        timeout: float = settings.MAIL_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_token = api_token
        self.api_url = api_url
        self.from_email = from_email
        self.contact_email = contact_email
        self.frontend_url = frontend_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        if not api_token:
            logger.warning("POSTMARK_API_TOKEN not set - e-mail notifications are simulated")

    @classmethod
    def from_settings(cls) -> "NotificationService":
        return cls(settings.POSTMARK_API_TOKEN)

    @property
    def enabled(self) -> bool:
        return bool(self._api_token)

    def render(self, template: str, data: dict[str, Any]) -> tuple[str, str, str]:
        try:
            tpl = TEMPLATES[template]
        except KeyError:
            raise ValueError(f"Unknown e-mail template: {template}") from None
        escaped = {k: html.escape(str(v)) for k, v in data.items()}
        return (
            tpl.subject.substitute(data),
            tpl.html.substitute(escaped),
            tpl.text.substitute(data),
        )

    async def send(self, template: str, recipient: str, data: dict[str, Any]) -> None:
        subject, html_body, text_body = self.render(template, data)

        if not self.enabled:
            logger.info("Simulated e-mail '%s' to %s", template, recipient)
            return

        payload = {
            "From": self.from_email,
            "To": recipient,
            "Subject": subject,
            "HtmlBody": html_body,
            "TextBody": text_body,
            "MessageStream": "outbound",
        }
        headers = {
            "Accept": "application/json",
            "X-Postmark-Server-Token": self._api_token or "",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to send e-mail '%s' to %s: %s", template, recipient, exc)
            raise EmailSendError(f"could not send '{template}' to {recipient}") from exc

        logger.info("E-mail '%s' sent to %s", template, recipient)

    # ── Convenience wrappers ────────────────────────────────────────
    async def send_verification_email(self, email: str, token: str) -> None:
        await self.send(
            "welcome_verification",
            email,
            {"verification_url": f"{self.frontend_url}/verify-email?token={token}"},
        )

    async def send_password_reset_email(self, email: str, token: str) -> None:
        await self.send(
            "password_reset",
            email,
            {"reset_url": f"{self.frontend_url}/reset-password?token={token}"},
        )

    async def send_donation_receipt(
        self,
        email: str,
        *,
        donor_name: str,
        amount: Decimal,
        campaign_title: str,
        donation_id: int,
    ) -> None:
        await self.send(
            "donation_receipt",
            email,
            {
                "donor_name": donor_name,
                "amount": _format_amount(amount),
                "campaign_title": campaign_title,
                "receipt_number": f"AS-{donation_id}",
            },
        )

    async def send_campaign_owner_notification(
        self, email: str, *, campaign_title: str, donor_name: str, amount: Decimal
    ) -> None:
        await self.send(
            "campaign_owner_donation",
            email,
            {
                "campaign_title": campaign_title,
                "donor_name": donor_name,
                "amount": _format_amount(amount),
            },
        )

    async def send_contact_form(
        self, *, sender_name: str, sender_email: str, subject: str, message: str
    ) -> None:
        await self.send(
            "contact_form",
            self.contact_email,
            {
                "sender_name": sender_name,
                "sender_email": sender_email,
                "subject": subject,
                "message": message,
            },
        )

    async def send_contact_acknowledgment(
        self, *, sender_name: str, sender_email: str, subject: str
    ) -> None:
        await self.send(
            "contact_acknowledgment",
            sender_email,
            {"sender_name": sender_name, "subject": subject},
        )


def get_notifier(request: Request) -> NotificationService:
    """FastAPI dependency — the app-wide notification service."""
    return request.app.state.notifier
