from datetime import timedelta

import pytest

from app.exceptions import AuthenticationError
from app.models import Employee, Profile
from app.services import auth as auth_service


@pytest.fixture
def employee(db):
    profile = Profile(name="Admin")
    db.add(profile)
    db.flush()
    employee = Employee(
        firstname="Ada",
        lastname="Lovelace",
        email="ada@example.com",
        passwd=auth_service.get_password_hash("s3cret!"),
        profile_id=profile.id,
        active=True,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = auth_service.get_password_hash("s3cret!")
        assert hashed != "s3cret!"
        assert auth_service.verify_password("s3cret!", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_unknown_hash_format(self):
        assert auth_service.verify_password("s3cret!", "plain-text") is False


class TestTokens:
    def test_round_trip(self, db, employee):
        token = auth_service.create_access_token(employee)
        claims = auth_service.decode_token(token)
        assert claims["sub"] == "ada@example.com"
        assert claims["id"] == employee.id
        assert claims["name"] == "Ada Lovelace"
        assert claims["profile"] == "Admin"
        assert auth_service.get_employee_from_token(db, token).id == employee.id

    def test_expired_token(self, db, employee):
        token = auth_service.create_access_token(employee, expires_delta=timedelta(seconds=-5))
        assert auth_service.decode_token(token) is None
        assert auth_service.get_employee_from_token(db, token) is None

    def test_garbage_token(self, db):
        assert auth_service.get_employee_from_token(db, "not-a-jwt") is None

    def test_deactivated_employee_token(self, db, employee):
        token = auth_service.create_access_token(employee)
        employee.active = False
        db.commit()
        assert auth_service.get_employee_from_token(db, token) is None


class TestLogin:
    def test_success(self, db, employee):
        response = auth_service.login(db, "ada@example.com", "s3cret!")
        assert response.token_type == "Bearer"
        assert response.employee.name == "Ada Lovelace"
        assert db.get(Employee, employee.id).last_connection_date is not None

    @pytest.mark.parametrize("email,password", [
        ("ada@example.com", "wrong"),
        ("nobody@example.com", "s3cret!"),
    ])
    def test_bad_credentials(self, db, employee, email, password):
        with pytest.raises(AuthenticationError) as exc:
            auth_service.login(db, email, password)
        assert exc.value.message == "Invalid email or password"

    def test_inactive_employee(self, db, employee):
        employee.active = False
        db.commit()
        with pytest.raises(AuthenticationError):
            auth_service.login(db, "ada@example.com", "s3cret!")
