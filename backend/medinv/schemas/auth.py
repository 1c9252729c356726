from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class AccountInfo(BaseModel):
    username: str
    employee_id: Optional[int] = None


class LoginResponse(BaseModel):
    message: str
    user: AccountInfo
    access_token: str
    token_type: str = "bearer"
