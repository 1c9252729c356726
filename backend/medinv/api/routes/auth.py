"""Auth: staff login and logout.

SECURITY FEATURES:
- bcrypt password hashes
- Session token in an httpOnly, SameSite=strict cookie (Secure in production)
- Generic error message to prevent username enumeration
"""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy import select

from medinv.api.deps import get_current_session, get_database, get_settings
from medinv.core.audit import AuditLog
from medinv.core.config import Settings
from medinv.core.exceptions import AuthenticationFailed, InvalidRequest
from medinv.core.security import create_access_token, verify_password
from medinv.db.database import Database
from medinv.models import StaffAccount
from medinv.schemas.auth import AccountInfo, LoginRequest, LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
):
    if not data.username or not data.password:
        raise InvalidRequest("Username and password are required")

    client_ip = request.client.host if request.client else "unknown"
    account = await database.fetch_one(
        select(StaffAccount.username, StaffAccount.password, StaffAccount.employee_id)
        .where(StaffAccount.username == data.username)
    )
    if not account or not verify_password(data.password, account["password"]):
        AuditLog.log_authentication("failed_login", data.username, client_ip, False, reason="Bad credentials")
        raise AuthenticationFailed("Invalid username or password")

    token = create_access_token(
        subject=account["username"], employee_id=account["employee_id"], settings=settings
    )
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
        path="/",
    )
    AuditLog.log_authentication("login", account["username"], client_ip, True)

    return LoginResponse(
        message="Login successful",
        user=AccountInfo(username=account["username"], employee_id=account["employee_id"]),
        access_token=token,
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    session: dict = Depends(get_current_session),
):
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
        path="/",
    )
    client_ip = request.client.host if request.client else "unknown"
    AuditLog.log_authentication("logout", session["sub"], client_ip, True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=AccountInfo)
async def me(session: dict = Depends(get_current_session)):
    """Account named by the current session token."""
    return AccountInfo(username=session["sub"], employee_id=session.get("employeeId"))
