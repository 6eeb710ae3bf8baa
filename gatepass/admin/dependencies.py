from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gatepass.admin.auth_service import AdminAuthService
from gatepass.exceptions import AuthorizationError

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service() -> AdminAuthService:
    return AdminAuthService()


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AdminAuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Require a valid admin bearer token"""
    if credentials is None or not credentials.credentials:
        raise AuthorizationError("No token provided")
    return auth_service.verify_token(credentials.credentials)
