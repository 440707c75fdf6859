from datetime import datetime
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends

from schemas.reservation import ReserveRequest, ReserveResponse, ReservationListResponse
from services.notification_service import NotificationDispatcher, get_notifier
from services.reservation_service import ReservationService
from services.verification_service import get_clock
from services.verification_store import VerificationStore, get_store
from utils.logger_factory import new_logger

router = APIRouter()


def get_reservation_service(
    store: VerificationStore = Depends(get_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> ReservationService:
    return ReservationService(store, notifier, clock=clock)


@router.post("/reserve", response_model=ReserveResponse)
def reserve(
    payload: ReserveRequest,
    background_tasks: BackgroundTasks,
    service: ReservationService = Depends(get_reservation_service)
):
    log = new_logger("reserve")
    log.info(f"Reservation request from {payload.email} for {payload.date} {payload.time}")
    reservation = service.reserve(payload.to_fields(), background_tasks)
    return {"success": True, "reservation_id": reservation.id}


@router.get("/reservations", response_model=ReservationListResponse)
def list_reservations(service: ReservationService = Depends(get_reservation_service)):
    log = new_logger("list_reservations")
    reservations = service.list_reservations()
    log.info(f"Returning {len(reservations)} reservations")
    return {"success": True, "data": [r.to_dict() for r in reservations]}
