"""
Reservation gate: admits a reservation only for an email that has been verified.
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from fastapi import BackgroundTasks

from models.reservation import Reservation
from services.notification_service import NotificationDispatcher
from services.verification_service import utc_now
from services.verification_store import VerificationStore
from utils.errors import InvalidInput, VerificationRequired
from utils.logger_factory import new_logger

RESERVATION_FIELDS = (
    "name",
    "phone",
    "email",
    "program_type",
    "reservation_date",
    "reservation_time",
    "guests",
    "total_amount",
    "prepaid_amount",
)


class ReservationService:
    def __init__(self, store: VerificationStore, notifier: NotificationDispatcher,
                 clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.log = new_logger("reservation_service")

    def reserve(self, fields: Dict[str, Any], background_tasks: Optional[BackgroundTasks] = None) -> Reservation:
        """
        Persist a reservation for a verified email, then notify operator and customer.

        A verified email stays usable for later reservations; nothing is consumed.
        The commit is the point of no return, notification failures are only logged.
        With ``background_tasks`` the emails go out after the response is sent;
        without it they are sent before returning.
        """
        email = fields.get("email")
        if not email:
            raise InvalidInput("Email is required.")
        if not self.store.has_verified_email(email):
            self.log.info(f"Reservation refused, email not verified: {email}")
            raise VerificationRequired()

        reservation = Reservation(
            **{key: fields.get(key) for key in RESERVATION_FIELDS},
            created_at=self.clock(),
        )
        self.store.insert_reservation(reservation)
        self.log.info(f"Reservation stored [{reservation.to_dict()}]")

        if background_tasks is not None:
            background_tasks.add_task(self.notifier.send_reservation_notifications, reservation)
        else:
            self.notifier.send_reservation_notifications(reservation)
        return reservation

    def list_reservations(self) -> List[Reservation]:
        return self.store.list_reservations()
