from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import init_db, close_db
from utils.errors import InvalidInput, ReservationServiceError
from utils.logger_factory import new_logger, quiet_library_loggers

quiet_library_loggers()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Opened once per process; a failure here aborts startup
    init_db()
    yield
    close_db()


app = FastAPI(title="Laon Reservation API", lifespan=lifespan)


@app.middleware("http")
async def log_request_body(request: Request, call_next):
    log = new_logger("log_request_body")
    log.info(f"INCOMING REQUEST: {request.method} {request.url}")
    if request.method != "OPTIONS":  # Skip CORS preflight
        body = await request.body()
        if len(body) > 0:
            log.info(f"Request body ({request.method} {request.url.path}): {body[:1000]!r}")
    response = await call_next(request)
    return response


@app.exception_handler(ReservationServiceError)
async def reservation_service_error_handler(request: Request, exc: ReservationServiceError):
    log = new_logger("reservation_service_error_handler")
    log.warning(f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    log = new_logger("request_validation_error_handler")
    fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()]
    fields = [f for f in fields if f]
    log.warning(f"{request.method} {request.url.path} rejected, invalid fields: {fields}")
    # Same body shape as domain errors; the raw input is not echoed back
    error = InvalidInput(f"Invalid or missing field: {', '.join(fields)}." if fields else None)
    return JSONResponse(status_code=error.status_code, content=error.to_response())


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"message": "Laon Reservation API server is running."}


from api.verification_code import router as verification_code_router
from api.reservations import router as reservations_router
from api.healthcheck import router as health_router

app.include_router(verification_code_router, prefix="/api")
app.include_router(reservations_router, prefix="/api")
app.include_router(health_router, prefix="/api")


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8001)))
