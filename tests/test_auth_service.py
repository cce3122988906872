from hrleave.services import auth as auth_service
from hrleave.models.user import User, UserRole


def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)


def test_verify_password_with_malformed_hash():
    assert not auth_service.verify_password("anything", "not-a-hash")


def test_token_roundtrip_claims():
    token = auth_service.create_access_token({"sub": "hr@alphacorp.com", "role": "HR"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "hr@alphacorp.com"
    assert payload["type"] == "access"
    assert "exp" in payload


def test_expired_token_is_flagged():
    token = auth_service.create_access_token({"sub": "hr@alphacorp.com"}, expires_minutes=-5)
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}


def test_create_user(db_session):
    """Test creating a new employee account."""
    email = "newuser@example.com"
    password = "Password123!"

    user = User(
        employee_code="EMP777",
        email=email,
        hashed_password=auth_service.get_password_hash(password),
        first_name="Malee",
        last_name="Srisuk",
        role=UserRole.EMPLOYEE,
    )
    db_session.add(user)
    db_session.commit()

    saved_user = db_session.query(User).filter(User.email == email).first()
    assert saved_user is not None
    assert saved_user.full_name == "Malee Srisuk"
    assert saved_user.is_active
    assert not saved_user.is_hr
    assert auth_service.verify_password(password, saved_user.hashed_password)
