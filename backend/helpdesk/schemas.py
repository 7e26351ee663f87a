import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator

_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"\d")
_SYMBOL = re.compile(r"[^A-Za-z0-9]")


def validate_strong_password(value: str) -> str:
    if (
        len(value) < 8
        or not _LOWER.search(value)
        or not _UPPER.search(value)
        or not _DIGIT.search(value)
        or not _SYMBOL.search(value)
    ):
        raise ValueError(
            "La contraseña debe tener al menos 8 caracteres, una minúscula, "
            "una mayúscula, un número y un símbolo"
        )
    return value


StrongPassword = Annotated[str, AfterValidator(validate_strong_password)]


# ---------- Auth ----------

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    token: str = Field(..., min_length=1)


class VerifyRequest(BaseModel):
    email: EmailStr
    token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    email: EmailStr
    password: StrongPassword
    confirm_password: str
    token: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    ok: bool = True
    message: str


# ---------- Roles ----------

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=50)
    description: Optional[str] = Field(None, max_length=255)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=50)
    description: Optional[str] = Field(None, max_length=255)


class RoleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


# ---------- Users ----------

class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=3, max_length=100)
    last_name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: StrongPassword
    confirm_password: str
    rol: str = Field(..., min_length=1)
    phone: Optional[str] = Field(None, max_length=30)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=3, max_length=100)
    last_name: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    old_password: Optional[str] = None
    password: Optional[StrongPassword] = None
    confirm_password: Optional[str] = None
    rol: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    active: Optional[bool] = None

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password is not None and self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str


class RoleRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    active: bool
    role: Optional[RoleRef] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    user: UserOut
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# ---------- Categorías ----------

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    status: Optional[bool] = None


class ChangeStatus(BaseModel):
    status: bool


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    status: bool
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


# ---------- Prioridades ----------

class PriorityCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=60)


class PriorityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=60)


class PriorityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


# ---------- Tickets ----------

class TicketCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1)
    category_id: str
    priority_id: str


class TicketChangeStatus(BaseModel):
    status: str = Field(..., min_length=1, max_length=50)
    comments: Optional[str] = None


class AssignTech(BaseModel):
    assigned_tech_id: str


class NamedRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    ticket_code: str
    title: str
    description: str
    status: str
    comments: Optional[str] = None
    priority: Optional[NamedRef] = None
    category: Optional[NamedRef] = None
    creator: Optional[UserRef] = None
    assigned_technician: Optional[UserRef] = None
    assigned_date: Optional[datetime] = None
    closed_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
