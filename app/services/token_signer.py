import uuid
from datetime import datetime
from typing import Any, Callable

from jose import JWTError, jwt

from app.core.config import TokenConfig
from app.core.errors import UnauthorizedError
from app.models.base import utc_now
from app.services.credential_verifier import Principal

ACCESS_TOKEN_TYPE = 'access'


def new_jti() -> str:
    return str(uuid.uuid4())


class TokenSigner:
    """Signs short-lived access tokens. Holds no state beyond its config."""

    def __init__(self, config: TokenConfig, *, now_fn: Callable[[], datetime] = utc_now):
        self.config = config
        self.now_fn = now_fn

    def issue_access_token(self, principal: Principal) -> str:
        now = self.now_fn()
        payload: dict[str, Any] = {
            'sub': principal.user_id,
            'iss': self.config.issuer,
            'aud': self.config.audience,
            'jti': new_jti(),
            'name': principal.full_name,
            'roles': list(principal.roles),
            'type': ACCESS_TOKEN_TYPE,
            'iat': int(now.timestamp()),
            'exp': int((now + self.config.access_ttl).timestamp()),
        }
        return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)

    def decode_access_token(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                audience=self.config.audience,
                issuer=self.config.issuer,
            )
        except JWTError as exc:
            raise UnauthorizedError('Invalid token') from exc

        if payload.get('type') != ACCESS_TOKEN_TYPE:
            raise UnauthorizedError('Invalid token type')
        if not payload.get('sub'):
            raise UnauthorizedError('Invalid token')
        return payload
