# app/main.py
from fastapi import FastAPI, Depends, Form, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from typing import Optional
import logfire

from .config import LOGFIRE_TOKEN, get_cors_origins, load_sheet_config
from .exceptions import ConflictError, InternalError, ValidationError
from .models import WaitlistResponse, ErrorResponse, EmailCheck, EmailCheckResponse, HealthResponse
from .verification_service import VerificationService
from .waitinglist_service import WaitlistService

logfire.configure(token=LOGFIRE_TOKEN, send_to_logfire="if-token-present", scrubbing=False)

app = FastAPI(title="Waitlist API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_verification_service() -> VerificationService:
    return VerificationService()


def get_waitlist_service() -> WaitlistService:
    return WaitlistService()


def _error_response(status_code: int, code: str, message: str, fields=None) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, fields=fields or {})
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(400, "BAD_REQUEST", exc.message, exc.field_errors)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    fields = {str(error["loc"][-1]): error["msg"] for error in exc.errors()}
    return _error_response(400, "BAD_REQUEST", "Invalid input", fields)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError):
    return _error_response(409, "CONFLICT", exc.message)


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError):
    logfire.error(f"Request to {request.url.path} failed: {exc.__cause__!r}")
    return _error_response(500, "INTERNAL_SERVER_ERROR", exc.message)


@app.get("/")
def root():
    return {"message": "Waitlist API is running"}


# Waitinglist endpoints
@app.post(
    "/api/waitlist",
    response_model=WaitlistResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def join_waitlist(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    verification_service: VerificationService = Depends(get_verification_service),
    waitlist: WaitlistService = Depends(get_waitlist_service),
):
    """Handle waitlist form submission"""
    entry = verification_service.validate_signup(name, email)
    message = waitlist.join(entry)
    logfire.info(f"Waitlist signup accepted for {entry.email}")
    return WaitlistResponse(message=message)


@app.post(
    "/api/waitlist/check",
    response_model=EmailCheckResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def check_existing(
    email_check: EmailCheck,
    verification_service: VerificationService = Depends(get_verification_service),
    waitlist: WaitlistService = Depends(get_waitlist_service),
):
    """Check if email already exists"""
    result = verification_service.validate_email(email_check.email)
    if not result["valid"]:
        raise ValidationError({"email": result["error"]})

    exists = waitlist.check_existing_signup(result["value"])
    return EmailCheckResponse(exists=exists)


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        backend=load_sheet_config().backend,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
