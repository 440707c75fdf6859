"""
Email notifications for verification codes and confirmed reservations.
"""
import logging
import os
import smtplib
import socket
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from utils.errors import NotificationFailed
from utils.logger_factory import new_logger

EMAIL_SERVER_HOST = os.getenv("EMAIL_SERVER_HOST", "smtp.gmail.com")
EMAIL_SERVER_PORT = int(os.getenv("EMAIL_SERVER_PORT", 587))
EMAIL_SERVER_USER = os.getenv("EMAIL_SERVER_USER")
EMAIL_SERVER_PASS = os.getenv("EMAIL_SERVER_PASS")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "LAON CAFE")
OPERATOR_EMAIL = os.getenv("OPERATOR_EMAIL") or EMAIL_SERVER_USER

CODE_VALID_MINUTES = 10

smtp_retry_logger = new_logger("smtp_send_retry")

# Connection-level faults only; rejected recipients or bad credentials are not retried
TRANSIENT_SMTP_ERRORS = (
    smtplib.SMTPServerDisconnected,
    smtplib.SMTPConnectError,
    socket.timeout,
    ConnectionError,
)


class SmtpMailer:
    """Sends plain-text mail through the configured SMTP account."""

    def __init__(self, host=None, port=None, user=None, password=None, from_name=None, timeout=10):
        self.host = host or EMAIL_SERVER_HOST
        self.port = port or EMAIL_SERVER_PORT
        self.user = user or EMAIL_SERVER_USER
        self.password = password or EMAIL_SERVER_PASS
        self.from_name = from_name or EMAIL_FROM_NAME
        self.timeout = timeout

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
        before_sleep=before_sleep_log(smtp_retry_logger, logging.WARNING),
        reraise=True
    )
    def send(self, to: str, subject: str, body: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f'"{self.from_name}" <{self.user}>'
        msg["To"] = to
        msg.attach(MIMEText(body, "plain", "utf-8"))

        # A new connection per message; no pooled SMTP sessions
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.user, self.password)
            server.sendmail(self.user, to, msg.as_string())


class NotificationDispatcher:
    """Formats customer/operator messages and hands them to a mail transport.

    The transport only needs a ``send(to, subject, body)`` method.
    """

    def __init__(self, transport, operator_email=None):
        self.transport = transport
        self.operator_email = operator_email or OPERATOR_EMAIL
        self.log = new_logger("notification_dispatcher")

    def send(self, to: str, subject: str, body: str) -> None:
        self.transport.send(to, subject, body)
        self.log.info(f"Email sent to {to} [{subject}]")

    def send_verification_code(self, email: str, code: str) -> None:
        """Deliver a code to the requester; delivery failure is reported to the caller."""
        subject = "[LAON CAFE] Your reservation verification code"
        body = (
            "Hello, this is LAON CAFE.\n\n"
            f"Your verification code is [{code}].\n"
            f"Please enter it within {CODE_VALID_MINUTES} minutes."
        )
        try:
            self.send(email, subject, body)
        except Exception as e:
            self.log.error(f"Failed to send verification email to {email}: {e}")
            raise NotificationFailed(e) from e

    def send_reservation_notifications(self, reservation) -> None:
        """
        Notify the operator and the customer about a stored reservation.

        The reservation is already committed, so each failure is logged and
        the other message is still attempted.
        """
        summary = (
            f"Name: {reservation.name}\n"
            f"Phone: {reservation.phone}\n"
            f"Email: {reservation.email}\n"
            f"Program: {reservation.program_type}\n"
            f"Date: {reservation.reservation_date}\n"
            f"Time: {reservation.reservation_time}\n"
            f"Guests: {reservation.guests}\n"
            f"Total amount: {reservation.total_amount}\n"
            f"Prepaid amount: {reservation.prepaid_amount}\n"
        )
        messages = []
        if self.operator_email:
            messages.append((
                self.operator_email,
                f"[LAON CAFE] New reservation #{reservation.id}",
                f"A new reservation has been made.\n\n{summary}",
            ))
        else:
            self.log.warning(f"No operator address configured, skipping operator email for reservation {reservation.id}")
        if reservation.email:
            messages.append((
                reservation.email,
                "[LAON CAFE] Your reservation is confirmed",
                f"Hello {reservation.name},\n\nYour reservation has been received.\n\n{summary}",
            ))

        for to, subject, body in messages:
            try:
                self.send(to, subject, body)
            except Exception as e:
                self.log.error(f"Reservation {reservation.id} notification to {to} failed: {e}")


def get_notifier() -> NotificationDispatcher:
    return NotificationDispatcher(SmtpMailer())
