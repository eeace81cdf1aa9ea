import smtplib
import uuid
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import escape
import os

from core.config import (
    EMAIL_SUBJECT,
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS,
    email_region, email_sender, get_ses_client, logger,
)
from core.errors import EmailDispatchError
from models.brand import ImageResult

# Jinja env
_templates_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
_jinja_env = Environment(
    loader=FileSystemLoader(_templates_dir),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_results_html(results: List[ImageResult], package_url: str = "") -> str:
    return _jinja_env.get_template("brand_results.html").render(
        results=results,
        package_url=package_url,
    )


def render_error_html(message: str) -> str:
    # HTML-escaped, not echoed raw
    return f"<h1>Error processing request</h1><p>{escape(message)}</p>"


def send_email_ses(to_addr: str, subject: str, html: str, from_addr: Optional[str] = None) -> None:
    client = get_ses_client(email_region())
    client.send_email(
        Source=from_addr or email_sender(),
        Destination={"ToAddresses": [to_addr]},
        Message={
            "Subject": {"Data": subject},
            "Body": {"Html": {"Data": html}},
        },
    )


def send_email_smtp(to_addr: str, subject: str, html: str, from_addr: Optional[str] = None) -> None:
    sender = (from_addr or email_sender()).strip()
    domain = sender.split("@")[-1] if "@" in sender else "localhost"

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_addr
    msg["Message-ID"] = f"<{uuid.uuid4()}@{domain}>"
    msg["Date"] = datetime.utcnow().strftime("%a, %d %b %Y %H:%M:%S +0000")
    msg.attach(MIMEText("Open this message in an HTML-capable email client.", "plain", _charset="utf-8"))
    msg.attach(MIMEText(html or "", "html", _charset="utf-8"))

    with smtplib.SMTP(SMTP_HOST, SMTP_PORT) as server:
        server.starttls()
        if SMTP_USER or SMTP_PASS:
            server.login(SMTP_USER, SMTP_PASS)
        server.sendmail(sender, [to_addr], msg.as_string())


class ResultsMailer:
    """Sends the results page to the requester; never raises."""

    def deliver(self, to_addr: str, html: str) -> None:
        if SMTP_HOST:
            send_email_smtp(to_addr, EMAIL_SUBJECT, html)
        else:
            send_email_ses(to_addr, EMAIL_SUBJECT, html)

    def send(self, to_addr: Optional[str], html: str) -> bool:
        try:
            if not to_addr:
                raise EmailDispatchError("no destination address")
            self.deliver(to_addr, html)
            logger.info("Email sent successfully")
            return True
        except Exception as ex:
            logger.exception(f"Failed to send email: {ex}")
            return False
