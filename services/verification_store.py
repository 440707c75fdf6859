"""
Store for verification codes and reservations.

Every write goes through this class; SQLAlchemy faults are rolled back and
re-raised as ``StorageError``. Nothing here retries.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from models.email_verification import EmailVerification
from models.reservation import Reservation
from utils.errors import StorageError
from utils.logger_factory import new_logger


class VerificationStore:
    """Persistence handle bound to one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db
        self.log = new_logger("verification_store")

    def _fail(self, operation: str, e: SQLAlchemyError):
        self.db.rollback()
        self.log.exception(f"Database operation failed in {operation}")
        raise StorageError(e) from e

    def insert_verification(self, record: EmailVerification) -> int:
        """Append a new verification record and return its id."""
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self._fail("insert_verification", e)
        return record.id

    def find_active_match(self, email: str, code: str, now: datetime) -> Optional[EmailVerification]:
        """
        Return an unexpired, unverified record for ``email`` and ``code``.

        When the same code was issued twice for one email, the newest row is
        preferred, but callers must not rely on which duplicate comes back.
        """
        try:
            return (
                self.db.query(EmailVerification)
                .filter(
                    EmailVerification.email == email,
                    EmailVerification.code == code,
                    EmailVerification.expires_at > now,
                    EmailVerification.is_verified == False,  # noqa: E712
                )
                .order_by(EmailVerification.created_at.desc(), EmailVerification.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            self._fail("find_active_match", e)

    def mark_verified(self, verification_id: int) -> None:
        """Set is_verified on a record. Running it twice is harmless."""
        try:
            self.db.execute(
                update(EmailVerification)
                .where(EmailVerification.id == verification_id)
                .values(is_verified=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("mark_verified", e)

    def claim_verification(self, verification_id: int, now: datetime) -> bool:
        """
        Atomically flip a still-active record to verified.

        Single conditional UPDATE; True only for the caller whose statement
        affected the row, so concurrent duplicates get False.
        """
        try:
            result = self.db.execute(
                update(EmailVerification)
                .where(
                    EmailVerification.id == verification_id,
                    EmailVerification.is_verified == False,  # noqa: E712
                    EmailVerification.expires_at > now,
                )
                .values(is_verified=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("claim_verification", e)
        return result.rowcount == 1

    def has_verified_email(self, email: str) -> bool:
        try:
            found = (
                self.db.query(EmailVerification.id)
                .filter(
                    EmailVerification.email == email,
                    EmailVerification.is_verified == True,  # noqa: E712
                )
                .first()
            )
        except SQLAlchemyError as e:
            self._fail("has_verified_email", e)
        return found is not None

    def insert_reservation(self, record: Reservation) -> int:
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self._fail("insert_reservation", e)
        return record.id

    def list_reservations(self) -> List[Reservation]:
        """All reservations, latest reservation_date first."""
        try:
            return (
                self.db.query(Reservation)
                .order_by(Reservation.reservation_date.desc(), Reservation.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self._fail("list_reservations", e)


def get_store(db: Session = Depends(get_db)) -> VerificationStore:
    return VerificationStore(db)
