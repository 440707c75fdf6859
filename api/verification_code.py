from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends

from schemas.verification_code import SendVerificationRequest, VerifyCodeRequest, VerificationResponse
from services.notification_service import NotificationDispatcher, get_notifier
from services.verification_service import VerificationService, get_clock
from services.verification_store import VerificationStore, get_store
from utils.logger_factory import new_logger

router = APIRouter()


def get_verification_service(
    store: VerificationStore = Depends(get_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> VerificationService:
    return VerificationService(store, notifier, clock=clock)


@router.post("/send-verification", response_model=VerificationResponse)
def send_verification(
    payload: SendVerificationRequest,
    service: VerificationService = Depends(get_verification_service)
):
    log = new_logger("send_verification")
    log.info(f"Sending verification code to {payload.email}")
    service.send_code(payload.email)
    return {"success": True, "message": "Verification code has been sent."}


@router.post("/verify-code", response_model=VerificationResponse)
def verify_code(
    payload: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service)
):
    log = new_logger("verify_code")
    log.info(f"Verifying code for {payload.email}")
    service.verify(payload.email, payload.code)
    return {"success": True, "message": "Email has been verified."}
