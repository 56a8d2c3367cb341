from typing import Optional
from pydantic import BaseModel, EmailStr, constr


class SignupRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    email: EmailStr
    password: constr(min_length=8, max_length=128)
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: constr(min_length=1)


class RefreshRequest(BaseModel):
    refresh: str
