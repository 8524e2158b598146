"""
OAuth2 authentication and token management for Spotify API

This module implements the OAuth2 authorization code flow used by
Playlist-Archiver. A stored token is reused while it is fresh, refreshed
when it has expired, and replaced through a browser-based authorization
when neither works.

The authorization flow is one-shot:
1. Build the authorization URL carrying the anti-forgery state
2. Print it for the user to open
3. Serve exactly one callback on the redirect address
4. Check the state parameter and exchange the code for tokens
5. Hand the result to the waiting caller through a one-slot queue
6. Shut the listener down and store the token for future runs

Security considerations:
- Tokens stored with restrictive file permissions (600)
- A callback whose state does not match the issued one never yields a token
- The wait for the callback is bounded by spotify.auth_timeout
"""

import queue
import secrets
import threading
import urllib.parse
import webbrowser
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any, Callable, Dict, Optional, Union

import requests
import spotipy

from .settings import Settings, get_settings
from .token import Token
from ..utils.exceptions import AuthError, ConfigError, StorageError, TokenError
from ..utils.helpers import read_json, write_json
from ..utils.logger import get_logger

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"

logger = get_logger(__name__)

SUCCESS_HTML = """
<html>
<head><title>Authorization Success</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: #1DB954;">Login completed!</h1>
    <p>You can close this window and return to the terminal.</p>
</body>
</html>
"""

FAILURE_HTML = """
<html>
<head><title>Authorization Failed</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: #E22134;">Authorization Failed</h1>
    <p>{message}</p>
</body>
</html>
"""


class CallbackHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for the OAuth2 redirect

    Only the first request to the callback path is processed. Its outcome
    (a Token or an AuthError) is delivered through the server's handoff
    queue after the browser has received its response. Any other request
    gets a 404 and is otherwise ignored.
    """

    def do_GET(self):
        parsed_url = urllib.parse.urlparse(self.path)
        if parsed_url.path != self.server.callback_path or self.server.completed:
            self._respond(404, "Not found.")
            return

        query_params = urllib.parse.parse_qs(parsed_url.query)
        received_state = query_params.get('state', [None])[0]

        if received_state != self.server.expected_state:
            self._respond(404, "Not found.")
            self.server.deliver(AuthError(
                f"State mismatch: {received_state} != {self.server.expected_state}",
                details={'received_state': received_state}
            ))
            return

        if 'error' in query_params:
            reason = query_params['error'][0]
            self._respond(403, f"Error: {reason}")
            self.server.deliver(AuthError(f"Authorization denied: {reason}", details={'error': reason}))
            return

        code = query_params.get('code', [None])[0]
        try:
            if not code:
                raise AuthError("No authorization code in callback")
            token = self.server.exchange(code)
        except AuthError as e:
            self._respond(403, f"Couldn't get token: {e}")
            self.server.deliver(e)
            return

        self._respond(200, body=SUCCESS_HTML)
        self.server.deliver(token)

    def _respond(self, status: int, message: str = "", body: Optional[str] = None) -> None:
        if body is None:
            body = FAILURE_HTML.format(message=message)
        payload = body.encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'text/html; charset=utf-8')
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        logger.debug("Callback server: " + format, *args)


class CallbackServer(HTTPServer):
    """
    Short-lived HTTP listener bound to the OAuth2 redirect address

    Args:
        address: (host, port) to bind
        callback_path: Path component of the redirect URI
        expected_state: State value issued in the authorization URL
        exchange: Callable turning an authorization code into a Token,
                  raising AuthError on failure
        handoff: One-slot queue receiving the single outcome
    """

    def __init__(
        self,
        address,
        callback_path: str,
        expected_state: str,
        exchange: Callable[[str], Token],
        handoff: "queue.Queue[Union[Token, AuthError]]"
    ):
        super().__init__(address, CallbackHandler)
        self.callback_path = callback_path
        self.expected_state = expected_state
        self.exchange = exchange
        self.handoff = handoff
        self.completed = False

    def deliver(self, outcome: Union[Token, AuthError]) -> None:
        self.completed = True
        self.handoff.put_nowait(outcome)


class SpotifyAuth:
    """
    Spotify OAuth2 authentication and token management

    Owns everything the authorization flow needs: the anti-forgery state,
    the redirect address, the scopes, and the handoff queue used by the
    callback listener.

    Attributes:
        settings: Application settings instance
        token_file: Path to token storage file
        client_id: Spotify application client ID
        client_secret: Spotify application client secret
        redirect_uri: OAuth2 callback URL
        scope: Permission scopes requested from the user
        state: Anti-forgery value sent with the authorization URL
    """

    def __init__(self, settings: Optional[Settings] = None, state: Optional[str] = None):
        self.settings = settings or get_settings()
        self.token_file = self.settings.get_token_storage_path()

        self.client_id = self.settings.spotify.client_id
        self.client_secret = self.settings.spotify.client_secret
        self.redirect_uri = self.settings.spotify.redirect_url
        self.scope = self.settings.spotify.scope
        self.state = state or secrets.token_urlsafe(16)

        self._handoff: Optional["queue.Queue[Union[Token, AuthError]]"] = None
        self._token: Optional[Token] = None
        self._spotify_client: Optional[spotipy.Spotify] = None

    def build_authorization_url(self) -> str:
        params = {
            'client_id': self.client_id,
            'response_type': 'code',
            'redirect_uri': self.redirect_uri,
            'scope': self.scope,
            'state': self.state,
        }
        return f"{AUTHORIZE_URL}?{urllib.parse.urlencode(params)}"

    def _load_token(self) -> Optional[Token]:
        """
        Load the stored token, None when there is none

        A missing file means "not authorized yet". A corrupt file is
        reported and treated the same way so that a fresh authorization
        can overwrite it.
        """
        try:
            data = read_json(self.token_file)
            if data is None:
                return None
            return Token.from_dict(data)
        except (StorageError, TokenError) as e:
            logger.warning(f"Ignoring stored token: {e}")
            return None

    def _save_token(self, token: Token) -> None:
        try:
            write_json(self.token_file, token.to_dict(), mode=0o600)
            logger.debug(f"Token saved to {self.token_file}")
        except StorageError as e:
            logger.warning(f"Error saving token to file: {e}")

    def _request_token(self, data: Dict[str, str]) -> Dict[str, Any]:
        """
        POST to the token endpoint with client credentials

        Raises:
            AuthError: On network failure or a non-2xx response
        """
        try:
            response = requests.post(
                TOKEN_URL,
                data=data,
                auth=(self.client_id, self.client_secret),
                timeout=30
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise AuthError(f"Token endpoint returned {status}", details={'status': status})
        except (requests.RequestException, ValueError) as e:
            raise AuthError(f"Token request failed: {e}")

    def _exchange_code_for_token(self, code: str) -> Token:
        """
        Exchange an authorization code for access and refresh tokens

        The redirect_uri must exactly match the one used in the
        authorization request.
        """
        token_data = self._request_token({
            'grant_type': 'authorization_code',
            'code': code,
            'redirect_uri': self.redirect_uri,
        })
        try:
            return Token.from_token_response(token_data)
        except (KeyError, TypeError, ValueError) as e:
            raise AuthError(f"Unexpected token response: {e}")

    def _refresh_token(self, token: Token) -> Optional[Token]:
        """
        Obtain a new access token from the refresh token

        Returns:
            The refreshed token, None if refreshing is not possible
        """
        if not token.refresh_token:
            return None

        try:
            token_data = self._request_token({
                'grant_type': 'refresh_token',
                'refresh_token': token.refresh_token,
            })
            refreshed = Token.from_token_response(token_data, previous_refresh_token=token.refresh_token)
        except (AuthError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Token refresh failed: {e}")
            return None

        self._save_token(refreshed)
        return refreshed

    def _authorize_new(self) -> Token:
        """
        Run the one-shot authorization code flow

        Returns:
            The newly issued token, already saved to the token file

        Raises:
            ConfigError: If client credentials are not configured
            AuthError: If the callback fails, is rejected, or never arrives
        """
        if not self.client_id or not self.client_secret:
            raise ConfigError(
                "Spotify client_id and client_secret must be configured "
                f"in {self.settings.get_credentials_path()} or the environment"
            )

        redirect = urllib.parse.urlparse(self.redirect_uri)
        address = (redirect.hostname or '127.0.0.1', redirect.port or 80)

        self._handoff = queue.Queue(maxsize=1)
        try:
            server = CallbackServer(
                address,
                callback_path=redirect.path or '/',
                expected_state=self.state,
                exchange=self._exchange_code_for_token,
                handoff=self._handoff
            )
        except OSError as e:
            raise AuthError(f"Cannot listen on {address[0]}:{address[1]}: {e}")

        server_thread = threading.Thread(target=server.serve_forever, name="oauth-callback", daemon=True)
        server_thread.start()

        try:
            authorization_url = self.build_authorization_url()
            print("Please log in to Spotify by visiting the following page in your browser:", authorization_url)
            if self.settings.spotify.open_browser:
                webbrowser.open(authorization_url)

            timeout = self.settings.spotify.auth_timeout
            logger.info(f"Waiting up to {timeout}s for authorization callback on {self.redirect_uri}")
            try:
                outcome = self._handoff.get(timeout=timeout)
            except queue.Empty:
                raise AuthError(f"No authorization callback received within {timeout} seconds")
        finally:
            server.shutdown()
            server.server_close()
            server_thread.join(timeout=5)
            self._handoff = None

        if isinstance(outcome, AuthError):
            raise outcome

        self._save_token(outcome)
        logger.console_info("Authorization successful")
        return outcome

    def get_valid_token(self) -> Token:
        """
        Get a usable token, refreshing or re-authorizing as needed

        Flow:
        1. Reuse the cached or stored token while it is valid (no network)
        2. Otherwise try the refresh token
        3. Otherwise run the authorization flow

        Raises:
            AuthError: If no token could be obtained
        """
        if self._token is None:
            self._token = self._load_token()

        leeway = self.settings.spotify.expiry_leeway
        if self._token is not None and self._token.is_valid(leeway=leeway):
            return self._token

        if self._token is not None:
            logger.info("Access token expired, refreshing...")
            self._token = self._refresh_token(self._token)

        if self._token is None:
            logger.info("No valid token found, starting authorization...")
            self._token = self._authorize_new()

        return self._token

    def get_access_token(self) -> str:
        return self.get_valid_token().access_token

    def get_spotify_client(self) -> spotipy.Spotify:
        """
        Get a spotipy client authorized with a valid access token

        The client instance is reused; only its token is updated.
        """
        access_token = self.get_access_token()
        if self._spotify_client is None:
            self._spotify_client = spotipy.Spotify(
                auth=access_token,
                requests_timeout=30,
                retries=0,
                status_retries=0
            )
        else:
            self._spotify_client.set_auth(access_token)
        return self._spotify_client

    def is_authenticated(self) -> bool:
        """Check for a valid stored token without any network or browser interaction"""
        token = self._token or self._load_token()
        return token is not None and token.is_valid(leeway=self.settings.spotify.expiry_leeway)

    def stored_token(self) -> Optional[Token]:
        return self._token or self._load_token()

    def revoke_token(self) -> bool:
        """
        Delete stored credentials

        Only local storage is removed; the tokens stay valid on Spotify's
        side until they expire.

        Returns:
            True if a token file was removed
        """
        self._token = None
        self._spotify_client = None

        if not self.token_file.exists():
            return False
        try:
            self.token_file.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete token file {self.token_file}: {e}")
        logger.info("Token revoked")
        return True


_auth_instance: Optional[SpotifyAuth] = None


def get_auth() -> SpotifyAuth:
    """
    Get the global authentication instance

    Returns:
        Global SpotifyAuth instance
    """
    global _auth_instance
    if not _auth_instance:
        _auth_instance = SpotifyAuth()
    return _auth_instance


def reset_auth() -> None:
    """
    Reset the global authentication instance

    Does not delete stored credentials, use SpotifyAuth.revoke_token() for that.
    """
    global _auth_instance
    _auth_instance = None
