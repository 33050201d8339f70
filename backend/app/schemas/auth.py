from pydantic import BaseModel, EmailStr
from app.schemas.common import CamelModel


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class EmployeeResponse(CamelModel):
    id: int
    email: str
    firstname: str
    lastname: str
    name: str
    profile: str | None = None


class LoginResponse(CamelModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int  # milliseconds
    employee: EmployeeResponse
