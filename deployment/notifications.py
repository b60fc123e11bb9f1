"""
Deployment alerts via Slack webhook and e-mail.

Both channels are optional and configured from the environment. A failed
alert is logged and never affects the outcome of a deployment run.
"""

import smtplib
import logging
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Mapping, Optional

import requests

from .config import optional_number

logger = logging.getLogger(__name__)


class DeploymentNotifier:
    def __init__(self, slack_webhook: Optional[str] = None,
                 smtp_server: str = "smtp.gmail.com", smtp_port: int = 587,
                 smtp_username: Optional[str] = None, smtp_password: Optional[str] = None,
                 notification_email: Optional[str] = None):
        self.slack_webhook = slack_webhook
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.notification_email = notification_email

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "DeploymentNotifier":
        return cls(
            slack_webhook=env.get("SLACK_WEBHOOK"),
            smtp_server=env.get("SMTP_SERVER", "smtp.gmail.com"),
            smtp_port=optional_number(env, "SMTP_PORT", int, 587),
            smtp_username=env.get("SMTP_USERNAME"),
            smtp_password=env.get("SMTP_PASSWORD"),
            notification_email=env.get("NOTIFICATION_EMAIL"),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.slack_webhook or self.notification_email)

    def send(self, subject: str, lines: List[str]):
        """Send an alert via email and/or Slack"""
        if self.notification_email:
            self._send_email_alert(subject, lines)

        if self.slack_webhook:
            self._send_slack_alert(subject, lines)

    def _send_email_alert(self, subject: str, lines: List[str]):
        try:
            if not all([self.smtp_username, self.smtp_password, self.notification_email]):
                logger.warning("Email notification not configured")
                return

            msg = MIMEMultipart()
            msg['From'] = self.smtp_username
            msg['To'] = self.notification_email
            msg['Subject'] = subject

            body = "\n".join([
                "Contract Deployment Alert",
                "",
                f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
                "",
            ] + lines)
            msg.attach(MIMEText(body, 'plain'))

            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            logger.info("Email alert sent successfully")

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email alert: {e}")

    def _send_slack_alert(self, subject: str, lines: List[str]):
        try:
            payload = {
                "text": subject,
                "attachments": [
                    {"text": "\n".join(lines) if lines else "No contracts deployed"}
                ]
            }

            response = requests.post(self.slack_webhook, json=payload, timeout=10)
            response.raise_for_status()

            logger.info("Slack alert sent successfully")

        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to send Slack alert: {e}")
