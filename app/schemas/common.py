from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class ErrorBody(BaseModel):
    code: str
    type: str


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    error: ErrorBody
    errors: Optional[dict[str, list[str]]] = None
    trace_id: Optional[str] = None
    timestamp: datetime
