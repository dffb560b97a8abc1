"""
Caller identity.

Authentication happens at the gateway in front of this service, which
forwards the verified user id in the X-User-Id header.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)

MAX_USER_ID_LENGTH = 128


def is_valid_user_id(user_id: str) -> bool:
    """User ids become storage path prefixes, so only [A-Za-z0-9_-] is allowed"""
    return (
        0 < len(user_id) <= MAX_USER_ID_LENGTH
        and user_id.replace("-", "").replace("_", "").isalnum()
    )


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not is_valid_user_id(x_user_id):
        logger.warning("❌ Rejected malformed X-User-Id header")
        raise HTTPException(status_code=400, detail="Invalid user identifier")
    return x_user_id
