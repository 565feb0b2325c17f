"""
Outbound SMS (Twilio REST API) and email (SMTP).
"""
import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable, List, Optional

import requests

from config import Settings
from schemas import DispatchResult

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

WELCOME_SMS = "Hi {name}, thanks for joining the Puddy Pictures Movie Club! Reply STOP anytime to opt out."
RESULT_SMS = "Check out our movie pick:"
RESULT_EMAIL_SUBJECT = "Puddy Pictures Result"
RESULT_EMAIL_TEXT = "Here is the movie pick result!"


class NotificationError(Exception):
    pass


def send_sms(settings: Settings, to: str, body: str, media_url: Optional[str] = None) -> str:
    """Send an SMS, or an MMS when media_url is an https URL. Returns the message SID."""
    if not (settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_phone_number):
        raise NotificationError("Twilio is not configured")
    data = {"To": to, "From": settings.twilio_phone_number, "Body": body}
    if media_url and media_url.startswith("https://"):
        data["MediaUrl"] = media_url
    try:
        resp = requests.post(
            TWILIO_MESSAGES_URL.format(sid=settings.twilio_account_sid),
            data=data,
            auth=(settings.twilio_account_sid, settings.twilio_auth_token),
            timeout=settings.http_timeout,
        )
    except requests.RequestException as e:
        raise NotificationError(f"Twilio request failed: {str(e)[:100]}") from e
    if resp.status_code >= 400:
        try:
            message = resp.json().get("message", resp.text)
        except ValueError:
            message = resp.text
        raise NotificationError(f"Twilio rejected message ({resp.status_code}): {message}")
    try:
        return resp.json().get("sid", "")
    except ValueError:
        return ""


def send_email(settings: Settings, to, subject: str, text: str,
               attachment: Optional[bytes] = None, filename: str = "result.png") -> None:
    if not settings.smtp_host:
        raise NotificationError("SMTP is not configured")
    recipients = to if isinstance(to, str) else ", ".join(to)
    try:
        msg = EmailMessage()
        msg["From"] = settings.smtp_user or ""
        msg["To"] = recipients
        msg["Subject"] = subject
        msg.set_content(text)
        if attachment is not None:
            msg.add_attachment(attachment, maintype="image", subtype="png", filename=filename)
    except ValueError as e:
        # header injection, e.g. a newline in the address
        raise NotificationError(f"Invalid email message for {recipients!r}: {e}") from e
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.http_timeout) as smtp:
            smtp.starttls()
            if settings.smtp_user and settings.smtp_pass:
                smtp.login(settings.smtp_user, settings.smtp_pass)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise NotificationError(f"Email to {recipients} failed: {e}") from e


def dispatch_results(settings: Settings, contacts: Iterable[str], image: bytes,
                     poster_url: Optional[str] = None) -> List[dict]:
    """Email the result image to addresses, text the poster to phone numbers.

    A failing contact is reported with status "error" and the rest still go out.
    """
    results = []
    for contact in contacts:
        try:
            if "@" in contact:
                logger.info("Sending email to %s", contact)
                send_email(settings, contact, RESULT_EMAIL_SUBJECT, RESULT_EMAIL_TEXT, attachment=image)
                results.append(DispatchResult(contact=contact, status="email sent").model_dump(exclude_none=True))
            else:
                logger.info("Sending SMS to %s", contact)
                send_sms(settings, contact, RESULT_SMS, media_url=poster_url)
                results.append(DispatchResult(contact=contact, status="sms sent").model_dump(exclude_none=True))
        except NotificationError as e:
            logger.error("Error sending to %s: %s", contact, e)
            results.append(DispatchResult(contact=contact, status="error", error=str(e)).model_dump())
    return results


def send_welcome_sms(settings: Settings, name: str, phone: str) -> bool:
    try:
        send_sms(settings, phone, WELCOME_SMS.format(name=name))
    except NotificationError as e:
        logger.error("Error sending welcome SMS to %s: %s", phone, e)
        return False
    logger.info("Confirmation SMS sent to %s", phone)
    return True
