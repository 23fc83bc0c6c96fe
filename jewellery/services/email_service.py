import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from jewellery.core import config

logger = logging.getLogger(__name__)


class EmailService:
    """Transactional mail over SMTP. Returns False instead of raising when delivery fails."""

    def __init__(self, host=None, port=None, username=None, password=None, from_email=None, from_name=None):
        self.host = host if host is not None else config.SMTP_HOST
        self.port = port or config.SMTP_PORT
        self.username = username if username is not None else config.SMTP_USER
        self.password = password if password is not None else config.SMTP_PASSWORD
        self.from_email = from_email or config.EMAIL_FROM
        self.from_name = from_name or config.EMAIL_FROM_NAME

    def send_email(self, to_email: str, subject: str, html_body: str) -> bool:
        if not self.host:
            logger.info(f"SMTP not configured, skipping email '{subject}' to {to_email}")
            return False

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = to_email
        message.attach(MIMEText(html_body, "html"))

        try:
            with smtplib.SMTP(self.host, self.port) as server:
                server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_email, [to_email], message.as_string())
            logger.info(f"Sent email '{subject}' to {to_email}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Failed to send email '{subject}' to {to_email}: {e}")
            return False

    def send_welcome_email(self, to_email: str, user_name: str) -> bool:
        subject = "Welcome to Elegant Jewellery!"
        body = f"""
        <h2>Welcome to Elegant Jewellery, {user_name}!</h2>
        <p>Thank you for registering with us. We're excited to have you as part of our community.</p>
        <p>Start exploring our collection of exquisite jewellery pieces designed just for you.</p>
        <p>If you have any questions, feel free to contact our customer support.</p>
        <br>
        <p>Best regards,</p>
        <p>The Elegant Jewellery Team</p>
        """
        return self.send_email(to_email, subject, body)

    def send_order_confirmation(self, to_email: str, user_name: str, order_id: int, order_status: str) -> bool:
        subject = f"Order Confirmation - Order #{order_id}"
        body = f"""
        <h2>Thank you for your order, {user_name}!</h2>
        <p>Your order #{order_id} has been successfully placed and is currently {order_status}.</p>
        <p>We will process your order soon and keep you updated on its status.</p>
        <p>You can track your order status by logging into your account.</p>
        <br>
        <p>Best regards,</p>
        <p>The Elegant Jewellery Team</p>
        """
        return self.send_email(to_email, subject, body)

    def send_order_status_update(self, to_email: str, user_name: str, order_id: int, new_status: str) -> bool:
        subject = f"Order Status Update - Order #{order_id}"
        body = f"""
        <h2>Hello {user_name},</h2>
        <p>Your order #{order_id} status has been updated to: {new_status}</p>
        <p>You can track your order status by logging into your account.</p>
        <br>
        <p>Best regards,</p>
        <p>The Elegant Jewellery Team</p>
        """
        return self.send_email(to_email, subject, body)
