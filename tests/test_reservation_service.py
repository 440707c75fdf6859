import asyncio
import time
from unittest.mock import MagicMock

import pytest
from fastapi import BackgroundTasks
from sqlalchemy.exc import OperationalError

from models.reservation import Reservation
from services.notification_service import NotificationDispatcher
from services.reservation_service import ReservationService
from services.verification_service import VerificationService
from services.verification_store import VerificationStore
from utils.errors import InvalidInput, StorageError, VerificationRequired


def reservation_fields(email="guest@x.com", date="2026-02-01", **overrides):
    fields = {
        "name": "Kim Minji",
        "phone": "010-1234-5678",
        "email": email,
        "program_type": "baking-class",
        "reservation_date": date,
        "reservation_time": "14:00",
        "guests": 3,
        "total_amount": 90000,
        "prepaid_amount": 30000,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def verify_email(store, notifier, clock):
    def _verify(email):
        service = VerificationService(store, notifier, clock=clock)
        record = service.send_code(email)
        service.verify(email, record.code)
    return _verify


@pytest.fixture
def reservations(store, notifier, clock):
    return ReservationService(store, notifier, clock=clock)


def test_reserve_requires_verified_email(reservations, db, mailer):
    with pytest.raises(VerificationRequired):
        reservations.reserve(reservation_fields())

    assert db.query(Reservation).count() == 0
    assert mailer.sent == []


def test_issued_but_unverified_code_does_not_open_gate(reservations, store, notifier, clock, db):
    VerificationService(store, notifier, clock=clock).send_code("guest@x.com")

    with pytest.raises(VerificationRequired):
        reservations.reserve(reservation_fields())
    assert db.query(Reservation).count() == 0


def test_reserve_without_email_is_invalid(reservations):
    with pytest.raises(InvalidInput):
        reservations.reserve(reservation_fields(email=None))


def test_reserve_after_verification_persists_and_notifies(reservations, verify_email, mailer, operator_email):
    verify_email("guest@x.com")
    mailer.sent.clear()

    reservation = reservations.reserve(reservation_fields())

    assert reservation.id is not None
    assert reservation.guests == 3
    assert reservation.total_amount == 90000
    assert reservation.prepaid_amount == 30000
    assert reservation.reservation_date == "2026-02-01"
    recipients = sorted(m["to"] for m in mailer.sent)
    assert recipients == sorted([operator_email, "guest@x.com"])
    operator_mail = next(m for m in mailer.sent if m["to"] == operator_email)
    assert "Kim Minji" in operator_mail["body"]
    assert f"#{reservation.id}" in operator_mail["subject"]


def test_notification_failure_keeps_reservation(reservations, verify_email, mailer, db, operator_email):
    verify_email("guest@x.com")
    mailer.sent.clear()
    mailer.fail_for.update({operator_email})

    reservation = reservations.reserve(reservation_fields())

    assert db.query(Reservation).filter_by(id=reservation.id).count() == 1
    # The customer message still goes out after the operator message fails
    assert [m["to"] for m in mailer.sent] == ["guest@x.com"]


def test_verified_email_can_reserve_more_than_once(reservations, verify_email):
    verify_email("guest@x.com")

    first = reservations.reserve(reservation_fields(date="2026-02-01"))
    second = reservations.reserve(reservation_fields(date="2026-02-02"))

    assert first.id != second.id


def test_list_reservations_newest_date_first(reservations, verify_email):
    verify_email("guest@x.com")
    for date in ("2026-03-10", "2026-05-01", "2026-01-20"):
        reservations.reserve(reservation_fields(date=date))

    dates = [r.reservation_date for r in reservations.list_reservations()]
    assert dates == ["2026-05-01", "2026-03-10", "2026-01-20"]


def test_storage_fault_surfaces_as_storage_error(notifier, clock):
    broken_db = MagicMock()
    cause = OperationalError("SELECT 1", {}, Exception("connection refused"))
    broken_db.query.side_effect = cause
    service = ReservationService(VerificationStore(broken_db), notifier, clock=clock)

    with pytest.raises(StorageError) as exc_info:
        service.reserve(reservation_fields())

    assert exc_info.value.cause is cause
    broken_db.rollback.assert_called_once()


class SlowMailer:
    def __init__(self, delay):
        self.delay = delay
        self.sent = []

    def send(self, to, subject, body):
        time.sleep(self.delay)
        self.sent.append(to)


def test_reserve_does_not_wait_for_confirmation_emails(store, clock, verify_email, operator_email):
    verify_email("guest@x.com")
    slow_mailer = SlowMailer(delay=0.5)
    service = ReservationService(store, NotificationDispatcher(slow_mailer, operator_email=operator_email), clock=clock)
    background_tasks = BackgroundTasks()

    started = time.monotonic()
    reservation = service.reserve(reservation_fields(), background_tasks)
    elapsed = time.monotonic() - started

    assert elapsed < 0.4
    assert reservation.id is not None
    assert slow_mailer.sent == []

    # Starlette runs the queued tasks once the response has been sent
    asyncio.run(background_tasks())
    assert sorted(slow_mailer.sent) == sorted([operator_email, "guest@x.com"])
