from __future__ import annotations
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from .config import MailConfig


log = logging.getLogger(__name__)


def format_sender(address: str, display_name: Optional[str] = None) -> str:
    name = (display_name or "").strip()
    return formataddr((name, address)) if name else address


def build_message(sender: str, to, subject: str, text: str = "", html: str = "") -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to if isinstance(to, str) else ", ".join(to)
    msg["Subject"] = subject or ""
    msg.set_content(text or "")
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


def send_mail(
    cfg: MailConfig,
    to,
    subject: str,
    text: str = "",
    html: str = "",
    from_display_name: Optional[str] = None,
) -> None:
    """Send one message through the configured SMTP account.

    Transport errors propagate as :class:`smtplib.SMTPException` or ``OSError``.
    """
    sender = format_sender(cfg.user, from_display_name or cfg.default_display_name)
    msg = build_message(sender, to, subject, text, html)
    with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout) as server:
        if cfg.use_tls:
            server.starttls()
        server.login(cfg.user, cfg.password)
        server.send_message(msg)
    log.info("Email sent to %s via %s", to, cfg.host)
