"""Notification services for sending booking e-mails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "dates": "Termín",
    "rooms": "Pokoje",
    "total_price": "Cena",
    "name": "Jméno",
    "email": "E-mail",
    "phone": "Telefon",
    "company": "Firma",
    "address": "Adresa",
    "city": "Město",
    "zip_code": "PSČ",
    "ico": "IČO",
    "dic": "DIČ",
    "notes": "Poznámka",
}


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, html_message: str) -> bool:
    """
    Odeslání e-mailu s HTML a textovou verzí.

    Returns:
        bool: True, pokud byl e-mail odeslán
    """
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def edit_link(booking: "Booking") -> str:
    return settings.BOOKING_EDIT_URL.format(token=booking.edit_token)


def _format_date(value: Any) -> str:
    return value.strftime("%d.%m.%Y") if hasattr(value, "strftime") else str(value)


def send_booking_confirmation_email(booking: "Booking") -> bool:
    """Potvrzení nové rezervace s odkazem pro úpravy."""
    subject = f"Potvrzení rezervace {booking.id}"
    rooms = ", ".join(booking.room_ids)

    html_message = f"""
    <html>
    <body>
        <h2>Dobrý den, {escape(booking.name)}!</h2>
        <p>Vaše rezervace byla úspěšně vytvořena.</p>

        <h3>Detaily rezervace:</h3>
        <ul>
            <li><strong>Číslo rezervace:</strong> {booking.id}</li>
            <li><strong>Příjezd:</strong> {_format_date(booking.start_date)}</li>
            <li><strong>Odjezd:</strong> {_format_date(booking.end_date)}</li>
            <li><strong>Pokoje:</strong> {"celá chata" if booking.is_bulk_booking else rooms}</li>
            <li><strong>Hosté:</strong> {booking.adults} dospělí, {booking.children} děti, {booking.toddlers} batolata</li>
            <li><strong>Celková cena:</strong> {booking.total_price} Kč</li>
        </ul>

        <p>Rezervaci můžete upravit nebo zrušit nejpozději 3 dny před příjezdem:<br>
        <a href="{edit_link(booking)}">{edit_link(booking)}</a></p>

        <p>S pozdravem,<br>Chata Mariánská</p>
    </body>
    </html>
    """

    return send_email_notification(booking.email, subject, html_message)


def send_booking_modification_email(booking: "Booking", changes: Dict[str, Any]) -> bool:
    """Oznámení o změně rezervace se seznamem změněných údajů."""
    subject = f"Změna rezervace {booking.id}"

    items = []
    for field, change in changes.items():
        label = FIELD_LABELS.get(field, field)
        old, new = change.get("old"), change.get("new")
        if field == "dates":
            old = " - ".join(_format_date(value) for value in old)
            new = " - ".join(_format_date(value) for value in new)
        elif isinstance(old, (list, tuple)):
            old, new = ", ".join(map(str, old)), ", ".join(map(str, new))
        items.append(f"<li><strong>{label}:</strong> {escape(old)} &rarr; {escape(new)}</li>")

    html_message = f"""
    <html>
    <body>
        <h2>Dobrý den, {escape(booking.name)}!</h2>
        <p>Vaše rezervace {booking.id} byla upravena.</p>

        <h3>Změny:</h3>
        <ul>
            {"".join(items)}
        </ul>

        <p>Aktuální podobu rezervace najdete zde:<br>
        <a href="{edit_link(booking)}">{edit_link(booking)}</a></p>

        <p>S pozdravem,<br>Chata Mariánská</p>
    </body>
    </html>
    """

    return send_email_notification(booking.email, subject, html_message)


def send_booking_deletion_email(snapshot: Dict[str, Any]) -> bool:
    """Oznámení o zrušení rezervace; řádek rezervace už neexistuje."""
    subject = f"Zrušení rezervace {snapshot['id']}"

    html_message = f"""
    <html>
    <body>
        <h2>Dobrý den, {escape(snapshot.get("name", ""))}!</h2>
        <p>Vaše rezervace {snapshot["id"]} na termín
        {snapshot["start_date"]} - {snapshot["end_date"]} byla zrušena.</p>

        <p>S pozdravem,<br>Chata Mariánská</p>
    </body>
    </html>
    """

    return send_email_notification(snapshot["email"], subject, html_message)
