from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import secrets

import jwt
from loguru import logger

from gatepass.admin.schemas import AdminLoginResponse
from gatepass.config import settings
from gatepass.exceptions import AuthorizationError
from gatepass.security import verify_password

ADMIN_ROLE = "admin"


class AdminAuthService:
    """Checks the configured admin credentials and issues time-boxed tokens"""

    def __init__(
        self,
        username: Optional[str] = None,
        password_hash: Optional[str] = None,
        expire_hours: Optional[int] = None,
    ):
        self.username = username or settings.ADMIN_USERNAME
        self.password_hash = password_hash or settings.ADMIN_PASSWORD_HASH
        self.expire_hours = expire_hours or settings.ADMIN_TOKEN_EXPIRE_HOURS

    def authenticate(self, username: str, password: str) -> bool:
        # Both checks always run
        username_ok = secrets.compare_digest(username.encode(), self.username.encode())
        password_ok = verify_password(password, self.password_hash)
        return username_ok and password_ok

    def create_access_token(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": self.username,
            "role": ADMIN_ROLE,
            "iat": now,
            "exp": now + timedelta(hours=self.expire_hours),
        }
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    def login(self, username: str, password: str) -> AdminLoginResponse:
        if not self.authenticate(username, password):
            logger.warning("Admin login failed for {!r}", username)
            raise AuthorizationError("Invalid credentials")

        logger.info("Admin {} logged in", username)
        return AdminLoginResponse(
            token=self.create_access_token(),
            expires_in=self.expire_hours * 3600,
        )

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthorizationError("Token expired")
        except jwt.PyJWTError:
            raise AuthorizationError("Invalid token")

        if payload.get("role") != ADMIN_ROLE:
            raise AuthorizationError("Invalid token")
        return payload
