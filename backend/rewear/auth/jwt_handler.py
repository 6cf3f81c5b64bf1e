"""
Access-token verification. Tokens are issued by the auth service; this API
only checks their signature and expiry and reads the subject.
"""

import logging
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from ..config import settings

logger = logging.getLogger(__name__)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode a bearer token. Returns the claims, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        return None

    if payload.get("sub") is None:
        logger.warning("Rejected access token without subject")
        return None
    return payload
