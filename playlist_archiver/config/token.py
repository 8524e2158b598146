"""
OAuth2 token model

The token is persisted in token.json between runs and replaced whenever a
fresh one is obtained. Validity is decided by comparing the expiry with the
current time, minus a small leeway.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ..utils.exceptions import TokenError

# Some encoders write nanosecond fractions, datetime only parses microseconds
_FRACTION_RE = re.compile(r'(\.\d{6})\d+')


def _parse_expiry(value: Any) -> Optional[datetime]:
    """Parse an expiry timestamp into an aware UTC datetime, None when unset"""
    if value in (None, '', 0):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if not isinstance(value, str):
        raise TokenError(f"Unsupported token expiry value: {value!r}")

    text = _FRACTION_RE.sub(r'\1', value.strip().replace('Z', '+00:00'))
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise TokenError(f"Invalid token expiry timestamp: {value}")

    # Year 1 is the "zero time" some encoders write for "no expiry"
    if parsed.year == 1:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class Token:
    """
    OAuth2 access/refresh token pair

    Attributes:
        access_token: Bearer token sent with every API request
        token_type: Token type reported by the token endpoint (normally "Bearer")
        refresh_token: Long-lived token used to obtain a new access token
        expiry: Absolute expiry time (UTC), None for a token that never expires
        scope: Space-separated scopes granted by the user
    """
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None
    scope: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Token':
        """
        Build a token from its stored representation

        Accepts the native token.json shape (``expiry`` ISO timestamp) and
        the epoch-seconds ``expires_at`` field some tools write instead.

        Raises:
            TokenError: If the data is not a token
        """
        if not isinstance(data, dict) or not data.get('access_token'):
            raise TokenError("Stored token has no access_token")

        expiry_value = data.get('expiry', data.get('expires_at'))
        return cls(
            access_token=data['access_token'],
            token_type=data.get('token_type') or 'Bearer',
            refresh_token=data.get('refresh_token') or None,
            expiry=_parse_expiry(expiry_value),
            scope=data.get('scope'),
        )

    @classmethod
    def from_token_response(
        cls,
        data: Dict[str, Any],
        previous_refresh_token: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> 'Token':
        """
        Build a token from a token-endpoint JSON response

        Spotify may omit refresh_token on refresh, in which case the
        previous one stays in use.
        """
        now = now or datetime.now(timezone.utc)
        expires_in = data.get('expires_in')
        return cls(
            access_token=data['access_token'],
            token_type=data.get('token_type') or 'Bearer',
            refresh_token=data.get('refresh_token') or previous_refresh_token,
            expiry=now + timedelta(seconds=int(expires_in)) if expires_in else None,
            scope=data.get('scope'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'access_token': self.access_token,
            'token_type': self.token_type,
            'refresh_token': self.refresh_token,
            'expiry': self.expiry.isoformat() if self.expiry else None,
        }
        if self.scope:
            data['scope'] = self.scope
        return data

    def is_valid(self, leeway: int = 10, now: Optional[datetime] = None) -> bool:
        """
        Check whether the access token can still be used

        Args:
            leeway: Seconds before expiry at which the token is already
                    considered expired
            now: Reference time, defaults to the current UTC time

        Returns:
            True if the token has an access token and is not (about to be) expired
        """
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        return self.expiry - timedelta(seconds=leeway) > now
