from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Any, Dict, Optional

from portal.core.security import decode_token_or_none

# Registration is public; a bearer token only widens the returned user view
optional_security = HTTPBearer(auto_error=False)


async def get_optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Optional[Dict[str, Any]]:
    """Decoded caller token, or None for anonymous / invalid tokens"""
    if credentials is None:
        return None
    return decode_token_or_none(credentials.credentials)
