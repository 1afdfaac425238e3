# app/models.py
from dataclasses import dataclass
from pydantic import BaseModel
from typing import Dict, Optional
from datetime import datetime


@dataclass(frozen=True)
class WaitlistEntry:
    """A validated signup: email trimmed and lowercased, name trimmed"""
    email: str
    name: str

    def as_row(self):
        return [self.email, self.name]


@dataclass(frozen=True)
class ServiceCredential:
    account_email: str
    private_key_bytes: bytes
    scope: str


@dataclass(frozen=True)
class JoinWaitlistResponse:
    exists: bool


# Waitinglist API models
class WaitlistResponse(BaseModel):
    message: str

class ErrorResponse(BaseModel):
    code: str
    message: str
    fields: Dict[str, str] = {}

class EmailCheck(BaseModel):
    email: Optional[str] = None

class EmailCheckResponse(BaseModel):
    exists: bool

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    backend: Optional[str] = None
