"""
Authentication utility functions for email verification links.
"""
import logging
import smtplib
import ssl
import asyncio
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from urllib.parse import urlencode

from ..config import Settings

# Set up logging
logger = logging.getLogger(__name__)

VERIFY_PATH = "/auth/studentEmailVerify/"


def build_verification_url(base_url: str, enrollment_number: str, email: str, token: str) -> str:
    """
    Build the link a student clicks to confirm their email.

    Args:
        base_url: Public base URL of this service
        enrollment_number: Enrollment number being verified
        email: Email address the link is sent to
        token: Signed verification token

    Returns:
        <base_url>/auth/studentEmailVerify/?eno=...&email=...&token=...
    """
    query = urlencode({"eno": enrollment_number, "email": email, "token": token})
    return f"{base_url.rstrip('/')}{VERIFY_PATH}?{query}"


class MailDispatcher:
    """
    Sends verification links over SMTP.

    Delivery is attempted exactly once per call; a failure is reported to the
    caller as False and never retried here.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def validate_email_config(self) -> bool:
        """
        Validates that all required email configuration variables are set.

        Returns:
            bool: True if all required config is present, False otherwise
        """
        required_configs = {
            "mail_username": self.settings.mail_username,
            "mail_password": self.settings.mail_password,
            "mail_from": self.settings.mail_from,
            "mail_server": self.settings.mail_server,
        }

        missing_configs = [name for name, value in required_configs.items() if not value]

        if missing_configs:
            logger.error(f"Missing email configuration: {', '.join(missing_configs)}")
            return False

        return True

    def render(self, to_address: str, verification_url: str) -> MIMEMultipart:
        """Build the verification email message."""
        safe_url = escape(verification_url, quote=True)
        html_content = f"""
    <html>
        <head>
            <title>Club Portal - Email Verification</title>
            <style>
                body {{ font-family: Arial, sans-serif; line-height: 1.6; }}
                .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
                .header {{ background-color: #2c3e50; color: white; padding: 10px; text-align: center; }}
                .content {{ padding: 20px; border: 1px solid #ddd; }}
                .button {{ display: inline-block; padding: 10px 20px; background-color: #2c3e50;
                        color: white; text-decoration: none; border-radius: 5px; margin: 20px 0; }}
                .footer {{ text-align: center; margin-top: 20px; font-size: 12px; color: #777; }}
            </style>
        </head>
        <body>
            <div class="container">
                <div class="header">
                    <h1>Club Portal</h1>
                </div>
                <div class="content">
                    <p>Hello,</p>
                    <p>Please confirm this email address for your club portal account by clicking the button below:</p>
                    <p style="text-align: center;">
                        <a href="{safe_url}" class="button">Verify Email</a>
                    </p>
                    <p>If you can't click the button, copy and paste this link into your browser:</p>
                    <p style="word-break: break-all;">{safe_url}</p>
                    <p>This link expires in {self.settings.verification_token_expire_minutes} minutes.
                    If you did not request it, please ignore this email.</p>
                </div>
                <div class="footer">
                    &copy; {datetime.now().year} Club Portal.
                </div>
            </div>
        </body>
    </html>
    """

        msg = MIMEMultipart()
        msg["From"] = self.settings.mail_from or ""
        msg["To"] = to_address
        msg["Subject"] = "Club Portal - Verify your email"
        msg.attach(MIMEText(html_content, "html"))
        return msg

    def _deliver(self, msg: MIMEMultipart) -> None:
        context = ssl.create_default_context()
        with smtplib.SMTP(
            self.settings.mail_server,
            self.settings.mail_port,
            timeout=self.settings.mail_timeout,
        ) as server:
            server.ehlo()
            if self.settings.mail_starttls:
                server.starttls(context=context)
                server.ehlo()
            server.login(self.settings.mail_username, self.settings.mail_password)
            server.send_message(msg)

    async def send(self, to_address: str, verification_url: str) -> bool:
        """
        Send a verification link to a student.

        Args:
            to_address: Recipient email address
            verification_url: Link produced by build_verification_url

        Returns:
            bool: True if the SMTP server accepted the message
        """
        if not self.validate_email_config():
            return False

        msg = self.render(to_address, verification_url)
        logger.info(f"Sending verification email to {to_address} via {self.settings.mail_server}:{self.settings.mail_port}")

        try:
            # smtplib is blocking; keep it off the event loop
            await asyncio.to_thread(self._deliver, msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {str(e)}")
            return False
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP recipients refused for {to_address}: {str(e)}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send verification email to {to_address}: {str(e)}")
            return False

        logger.info(f"Verification email sent to {to_address}")
        return True
