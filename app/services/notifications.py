"""
Outbound email.
Routes receive an EmailSender through Depends(get_email_sender) so tests and
other deployments can swap the transport.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from app.core.config import Settings, settings

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, to: str, subject: str, body_html: str, body_text: str = "") -> bool:
        ...


class SmtpEmailSender:
    """Transactional email over SMTP with STARTTLS."""

    def __init__(self, config: Settings):
        self.config = config

    def send(self, to: str, subject: str, body_html: str, body_text: str = "") -> bool:
        """
        Returns True on success, False if SMTP is not configured or the send failed.
        """
        cfg = self.config
        if not cfg.email_configured:
            logger.warning(f"[EMAIL] SMTP not configured. Would send to '{to}': {subject}")
            return False

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = cfg.EMAIL_FROM
            msg["To"] = to
            if body_text:
                msg.attach(MIMEText(body_text, "plain"))
            msg.attach(MIMEText(body_html, "html"))

            with smtplib.SMTP(cfg.SMTP_SERVER, cfg.SMTP_PORT, timeout=10) as srv:
                srv.ehlo()
                srv.starttls()
                srv.login(cfg.SMTP_USER, cfg.SMTP_PASSWORD)
                srv.sendmail(cfg.EMAIL_FROM, to, msg.as_string())

            logger.info(f"[EMAIL] Sent to '{to}': {subject}")
            return True
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"[EMAIL] Failed sending to '{to}': {exc}")
            return False


def get_email_sender() -> EmailSender:
    return SmtpEmailSender(settings)


def send_lease_finalized_email(
    sender: EmailSender,
    to_email: Optional[str],
    recipient_name: Optional[str],
    lease_title: str,
    lease_url: str,
) -> bool:
    if not to_email:
        return False

    name = recipient_name or "there"
    subject = f"Lease finalized: {lease_title}"
    html = f"""
<!DOCTYPE html>
<html>
<body style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;padding:20px;color:#333">
  <div style="background:#059669;padding:20px;border-radius:8px 8px 0 0;text-align:center">
    <h1 style="color:#fff;margin:0;font-size:22px">Lease Finalized</h1>
  </div>
  <div style="background:#fff;border:1px solid #e5e7eb;border-top:none;padding:30px;border-radius:0 0 8px 8px">
    <p>Hi <strong>{name}</strong>,</p>
    <p>Both parties have signed <strong>{lease_title}</strong>. The lease is now final.</p>
    <p><a href="{lease_url}" style="color:#2563eb">View the lease</a></p>
  </div>
</body>
</html>"""
    text = (
        f"Hi {name},\n\n"
        f"Both parties have signed '{lease_title}'. The lease is now final.\n\n"
        f"View it at: {lease_url}\n"
    )
    return sender.send(to_email, subject, html, text)
