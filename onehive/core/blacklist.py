"""
onehive/core/blacklist.py

Revoked-token lookup against the identity service's Redis.

The identity service writes `jwt_blacklist:<jti>` with a TTL matching the
token lifetime; this service only ever reads those keys.
"""

import logging

import redis.asyncio as redis

from onehive.core.config import settings

logger = logging.getLogger(__name__)

BLACKLIST_PREFIX = "jwt_blacklist:"

# Connections are opened lazily on the first command
redis_client: redis.Redis = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[type-arg]


def blacklist_key(jti: str) -> str:
    return f"{BLACKLIST_PREFIX}{jti}"


async def is_token_blacklisted(jti: str) -> bool:
    """True when the identity service has revoked `jti`. An unreachable Redis fails open."""
    try:
        return await redis_client.exists(blacklist_key(jti)) == 1
    except redis.RedisError as e:
        logger.error(f"[AUTH] Revocation lookup failed for jti={jti}, treating as valid: {e}")
        return False
