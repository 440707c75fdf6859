from pydantic import BaseModel
from typing import Optional


# Fields are optional so that a missing value is reported as a 400 by the service
class SendVerificationRequest(BaseModel):
    email: Optional[str] = None


class VerifyCodeRequest(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None


class VerificationResponse(BaseModel):
    success: bool
    message: str
