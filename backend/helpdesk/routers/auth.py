from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ANY_ROLE, Caller, require_roles
from ..deps import get_db, get_login_tracker, get_mailer
from ..mail import Mailer
from ..schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    UserOut,
    VerifyRequest,
)
from ..services import auth as auth_service
from ..services.auth import LoginAttemptTracker

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    tracker: LoginAttemptTracker = Depends(get_login_tracker),
):
    return auth_service.login(db, tracker, body)


@router.post("/verify/{token}", response_model=MessageResponse)
def verify(token: str, body: VerifyRequest, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return MessageResponse(message=auth_service.verify_account(db, mailer, token, body))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return MessageResponse(message=auth_service.forgot_password(db, mailer, body))


@router.post("/change-password/{token}", response_model=MessageResponse)
def change_password(
    token: str,
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    return MessageResponse(message=auth_service.change_password(db, mailer, token, body))


@router.post("/refresh", response_model=RefreshResponse)
def refresh(body: RefreshRequest):
    return auth_service.refresh(body)


@router.get("/profile", response_model=UserOut)
def profile(caller: Caller = Depends(require_roles(*ANY_ROLE))):
    return caller.user
