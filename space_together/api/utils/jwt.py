from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from config import ApplicationConfig


def create_access_token(
    user_id: str,
    email: str,
    role: Optional[str] = None,
    name: Optional[str] = None,
    expires_delta: timedelta = timedelta(hours=1),
) -> str:
    """
    Create user bearer token

    Args:
        user_id: User id (hex)
        email: User email
        role: User role (STUDENT, TEACHER, ADMIN, SCHOOLSTAFF)
        name: Display name
        expires_delta: Token expiration duration

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    payload = {
        "id": user_id,
        "email": email,
        "role": role,
        "name": name,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode user bearer token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        return jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"])
    except JWTError:
        return None


def create_school_token(school, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create school token granting access to one school's database

    Args:
        school: School entity (id, database_name, name, username)
        expires_delta: Token lifetime, SCHOOL_TOKEN_TTL_HOURS by default

    Returns:
        JWT token string (HS256, signed with SCHOOL_SECRET)
    """
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(hours=ApplicationConfig.SCHOOL_TOKEN_TTL_HOURS)
    payload = {
        "id": school.id,
        "database_name": school.database_name,
        "name": school.name,
        "username": school.username,
        "creator_id": school.creator_id,
        "logo": school.logo,
        "school_type": school.school_type.value if school.school_type else None,
        "affiliation": school.affiliation.value if school.affiliation else None,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.SCHOOL_SECRET, algorithm="HS256")


def verify_school_token(token: str) -> Optional[dict]:
    """
    Verify and decode school token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid or expired
    """
    try:
        return jwt.decode(token, ApplicationConfig.SCHOOL_SECRET, algorithms=["HS256"])
    except JWTError:
        return None
