"""
Authentication API endpoints.

Employee login and the bearer-token dependency guarding the admin API.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import Employee
from app.schemas.auth import LoginRequest, LoginResponse, EmployeeResponse
from app.schemas.common import ApiResponse, ok
from app.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


# ============== Dependencies ==============

async def require_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Employee:
    """Require a valid employee token - raises 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    employee = auth_service.get_employee_from_token(db, credentials.credentials)
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return employee


# ============== Endpoints ==============

@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Log in with employee email and password.

    Returns a bearer token valid for ``expiresIn`` milliseconds.
    """
    return ok(auth_service.login(db, data.email, data.password), "Login successful")


@router.get("/me", response_model=ApiResponse[EmployeeResponse])
def me(employee: Employee = Depends(require_admin)):
    """Currently authenticated employee."""
    return ok(auth_service.to_employee_response(employee))
