from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr


class UserOut(BaseModel):
    id: str
    username: str
    email: EmailStr
    full_name: str
    is_active: bool
    email_confirmed: bool
    roles: list[str]


class SessionOut(BaseModel):
    id: str
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    expires_at: datetime
