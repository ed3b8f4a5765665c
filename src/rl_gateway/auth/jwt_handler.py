"""JWT verification for tokens issued by the storefront/admin apps.

Token issuance (login, refresh) lives outside this service; we only verify
HS256 access tokens signed with the shared JWT_SECRET. `create_access_token`
exists for service-to-service tooling and tests.

NOTE: No token revocation. A disabled user is rejected at lookup time
(`is_active = FALSE`), not at decode time.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.rl_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_DEFAULT_EXPIRE = timedelta(minutes=30)


def create_access_token(user_id: str, expires_in: timedelta = _DEFAULT_EXPIRE) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": "access",
        "iat": now,
        "exp": now + expires_in,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_access_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature, expiry or token type is wrong.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access" or not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
