from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log
import logging
from database import get_db
from utils.logger_factory import new_logger

health_retry_logger = new_logger("health_check_retry")

router = APIRouter()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(health_retry_logger, logging.WARNING),
    reraise=True
)
def check_database(db: Session) -> bool:
    row = db.execute(text("SELECT 1 as health_check")).fetchone()
    return bool(row and row[0] == 1)


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Runs a trivial query so operators can tell whether the reservation
    store is reachable.

    Returns:
        200: API and database are operational
        500: database is unreachable or answered unexpectedly
    """
    log = new_logger("health_check")

    try:
        healthy = check_database(db)
    except SQLAlchemyError as e:
        log.error(f"Health check failed: {e}")
        healthy = False

    if not healthy:
        return JSONResponse(
            status_code=500,
            content={
                "status": "unhealthy",
                "message": "Database connection failed",
                "database": "disconnected"
            }
        )
    log.info("Health check passed - database is accessible")
    return {
        "status": "healthy",
        "message": "API and database are operational",
        "database": "connected"
    }
