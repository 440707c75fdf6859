"""
Email verification workflow: issue a code, send it, and confirm it.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models.email_verification import EmailVerification
from services.notification_service import NotificationDispatcher
from services.verification_store import VerificationStore
from utils.errors import InvalidInput, InvalidOrExpiredCode
from utils.logger_factory import new_logger

CODE_EXPIRY_MINUTES = 10
CODE_MIN = 100000
CODE_MAX = 999999


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_code() -> str:
    """Uniform 6-digit code in [100000, 999999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


class CodeGenerator:
    """Creates and stores verification records. Collisions between codes are allowed."""

    def __init__(self, store: VerificationStore, clock: Callable[[], datetime] = utc_now,
                 code_factory: Callable[[], str] = generate_code):
        self.store = store
        self.clock = clock
        self.code_factory = code_factory

    def issue(self, email: Optional[str]) -> EmailVerification:
        if not email or not email.strip():
            raise InvalidInput("Email is required.")
        now = self.clock()
        record = EmailVerification(
            email=email,
            code=self.code_factory(),
            expires_at=now + timedelta(minutes=CODE_EXPIRY_MINUTES),
            is_verified=False,
            created_at=now,
        )
        self.store.insert_verification(record)
        return record


class VerificationService:
    """
    Per-record state machine: Issued -> Verified | Expired | NotFound.

    Only the Issued -> Verified transition is written to the store. Expired
    and NotFound are never persisted; callers see both as InvalidOrExpiredCode.
    """

    def __init__(self, store: VerificationStore, notifier: NotificationDispatcher,
                 clock: Callable[[], datetime] = utc_now, code_generator: Optional[CodeGenerator] = None):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.code_generator = code_generator or CodeGenerator(store, clock=clock)
        self.log = new_logger("verification_service")

    def send_code(self, email: Optional[str]) -> EmailVerification:
        """Issue a code for ``email`` and mail it. Raises NotificationFailed if delivery fails."""
        record = self.code_generator.issue(email)
        self.log.info(f"Verification code generated [{record.to_dict()}]")
        self.notifier.send_verification_code(record.email, record.code)
        return record

    def verify(self, email: Optional[str], code: Optional[str]) -> EmailVerification:
        if not email or not code:
            raise InvalidInput("Email and verification code are required.")
        now = self.clock()
        record = self.store.find_active_match(email, code, now)
        if record is None:
            self.log.info(f"No active verification code for {email}")
            raise InvalidOrExpiredCode()
        # The lookup alone is not enough; only the conditional update decides the winner
        if not self.store.claim_verification(record.id, now):
            self.log.info(f"Verification record {record.id} was claimed by another request")
            raise InvalidOrExpiredCode()
        self.log.info(f"Email verified [{email}] using record {record.id}")
        return record


def get_clock() -> Callable[[], datetime]:
    return utc_now
