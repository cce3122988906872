from pydantic import BaseModel, EmailStr
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenUser(BaseModel):
    id: int
    email: str
    role: str
    employee_id: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: TokenUser


class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None
