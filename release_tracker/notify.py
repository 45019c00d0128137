"""Email notifications for fetch-cycle events.

Best-effort over stdlib smtplib: a failed notification is logged and never
interrupts the tracker.
"""

import logging
import smtplib
from email.message import EmailMessage

from release_tracker.config import NOTIFY_TO, SMTP_PASSWORD, SMTP_USER

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "[release-tracker]"


def is_enabled() -> bool:
    """Return True when all required email config vars are set."""
    return all([SMTP_USER, SMTP_PASSWORD, NOTIFY_TO])


def send_email(subject: str, body: str) -> None:
    """Send an email via Gmail SMTP, prefixing the subject with ``[release-tracker]``."""
    if not is_enabled():
        return

    full_subject = f"{SUBJECT_PREFIX} {subject}"

    msg = EmailMessage()
    msg["Subject"] = full_subject
    msg["From"] = SMTP_USER
    msg["To"] = NOTIFY_TO
    msg.set_content(body)

    try:
        with smtplib.SMTP("smtp.gmail.com", 587) as server:
            server.starttls()
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.send_message(msg)
        logger.info("Sent email: %s", full_subject)
    except (OSError, smtplib.SMTPException):
        logger.warning("Failed to send email: %s", full_subject, exc_info=True)


def notify_fetch_failure(error: Exception) -> None:
    """Alert that a fetch cycle produced no dataset."""
    send_email(
        subject="Fetch cycle failed",
        body=(
            f"The model release fetch cycle failed and no dataset was built.\n\n"
            f"Error: {error}\n\n"
            f"The previous export is unchanged. Run the tracker again with "
            f"--refresh once the Hub is reachable."
        ),
    )


def notify_empty_orgs(orgs: list[str]) -> None:
    """Alert that some tracked orgs contributed no models this cycle."""
    send_email(
        subject=f"{len(orgs)} org(s) returned no models",
        body=(
            "These tracked organizations returned no models in the last fetch "
            "cycle (request failure or empty listing):\n\n"
            + "\n".join(f"  - {org}" for org in orgs)
        ),
    )


def notify_dataset_refreshed(summary: list[str]) -> None:
    """Summarize a successful refresh."""
    body = "The model release dataset was refreshed:\n\n"
    body += "\n".join(f"  - {line}" for line in summary)
    send_email(subject="Dataset refreshed", body=body)
