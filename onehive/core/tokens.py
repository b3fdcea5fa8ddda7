"""
onehive/core/tokens.py

Access-token decoding. Tokens are minted by the identity service with the
shared SECRET_KEY; this service only verifies them and reads the claims.
"""

import logging

from jose import JWTError, jwt
from pydantic import ValidationError

from onehive.core.config import settings
from onehive.core.exceptions import UnauthorizedError
from onehive.core.schemas import TokenPayload

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify signature and expiry and return the typed claims.

    Raises:
        UnauthorizedError: if the token is malformed, expired or lacks required claims.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return TokenPayload.model_validate(payload)
    except (JWTError, ValidationError) as e:
        logger.warning(f"[AUTH] JWT decoding/validation failed: {e}")
        raise UnauthorizedError(headers={"WWW-Authenticate": "Bearer"})
