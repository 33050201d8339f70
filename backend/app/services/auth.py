"""
Authentication Service

Verifies employee credentials and issues/validates HS256 JWT access tokens.
"""
import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import AuthenticationError
from app.models import Employee
from app.schemas.auth import EmployeeResponse, LoginResponse

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Not a hash passlib recognises
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(employee: Employee, expires_delta: timedelta | None = None) -> str:
    """Signed token carrying the employee's email (``sub``), id, name and profile."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(milliseconds=settings.jwt_expiration_ms))
    claims = {
        "sub": employee.email,
        "id": employee.id,
        "name": employee.full_name,
        "profile": employee.profile.name if employee.profile else None,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Decode and validate a JWT token; None when invalid or expired."""
    try:
        return jwt.decode(token, get_settings().jwt_secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None


def get_employee_by_email(db: Session, email: str) -> Employee | None:
    return db.query(Employee).filter(Employee.email == email).first()


def authenticate_employee(db: Session, email: str, password: str) -> Employee | None:
    """Active employee matching the credentials, else None."""
    employee = get_employee_by_email(db, email)
    if not employee or not employee.active:
        return None
    if not verify_password(password, employee.passwd):
        return None
    return employee


def get_employee_from_token(db: Session, token: str) -> Employee | None:
    payload = decode_token(token)
    if payload is None:
        return None
    email = payload.get("sub")
    if not email:
        return None
    employee = get_employee_by_email(db, email)
    if employee is None or not employee.active:
        return None
    return employee


def to_employee_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        email=employee.email,
        firstname=employee.firstname,
        lastname=employee.lastname,
        name=employee.full_name,
        profile=employee.profile.name if employee.profile else None,
    )


def login(db: Session, email: str, password: str) -> LoginResponse:
    employee = authenticate_employee(db, email, password)
    if employee is None:
        logger.warning(f"Failed login attempt for {email}")
        raise AuthenticationError("Invalid email or password")

    employee.last_connection_date = datetime.now(timezone.utc)
    db.commit()
    db.refresh(employee)

    logger.info(f"Employee {employee.id} logged in")
    return LoginResponse(
        token=create_access_token(employee),
        token_type="Bearer",
        expires_in=get_settings().jwt_expiration_ms,
        employee=to_employee_response(employee),
    )
