"""Browser-based OAuth login for the Gemini backend.

Contains:
- OAuthToken: Cached access token model
- load_cached_token / save_token: Token cache in ~/.diffdraft/gemini_token.json
- OAuthCallbackServer: Short-lived local listener receiving one redirect
- authenticate: Full PKCE authorization-code flow
"""

import base64
import hashlib
import queue
import secrets
import sys
import threading
import webbrowser
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import parse_qs, urlencode, urlparse

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from diffdraft.llm.exceptions import AuthenticationError

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GEMINI_OAUTH_SCOPE = "https://www.googleapis.com/auth/generative-language.retriever"

CALLBACK_HOST = "localhost"
CALLBACK_PORT = 8080
CALLBACK_PATH = "/oauth2callback"
LOGIN_TIMEOUT = 300.0
TOKEN_EXPIRY_MARGIN = timedelta(seconds=10)
TOKEN_FILE_NAME = "gemini_token.json"

_PAGE = """<html><body style="font-family: sans-serif; text-align: center; padding: 50px;">
<h1>{heading}</h1>
<p>{detail}</p>
<p>You can close this window and return to the terminal.</p>
</body></html>"""


class OAuthToken(BaseModel):
    """An OAuth access token as returned by Google's token endpoint."""

    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Check the token is present and not about to expire.

        Tokens without an expiry never expire.
        """
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        expiry = self.expiry if self.expiry.tzinfo else self.expiry.replace(tzinfo=timezone.utc)
        return expiry - TOKEN_EXPIRY_MARGIN > now


def get_token_path() -> Path:
    """Get path to the cached Gemini token."""
    from diffdraft.global_config import get_global_config_dir

    return get_global_config_dir() / TOKEN_FILE_NAME


def load_cached_token() -> Optional[OAuthToken]:
    """Load the cached token, if there is a readable and valid one.

    A missing, unreadable or expired cache is not an error: the caller just
    logs in again.
    """
    token_path = get_token_path()
    try:
        token = OAuthToken.model_validate_json(token_path.read_text())
    except FileNotFoundError:
        return None
    except (OSError, ValidationError) as e:
        logger.debug(f"Ignoring unreadable token cache {token_path}: {e}")
        return None

    return token if token.is_valid() else None


def save_token(token: OAuthToken) -> None:
    """Write the token cache with owner-only permissions.

    Raises:
        OSError: If the cache cannot be written.
    """
    token_path = get_token_path()
    token_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    token_path.write_text(token.model_dump_json())
    token_path.chmod(0o600)


def save_token_best_effort(token: OAuthToken) -> None:
    """Save the token; a failure only costs a login next time."""
    try:
        save_token(token)
    except OSError as e:
        logger.warning(f"Failed to save Gemini token: {e}")


def generate_pkce_verifier() -> str:
    """Generate a PKCE code verifier."""
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).rstrip(b"=").decode("ascii")


def pkce_challenge(verifier: str) -> str:
    """Compute the S256 code challenge for a verifier."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_state() -> str:
    """Generate the CSRF state token."""
    return secrets.token_urlsafe(24)


def build_auth_url(client_id: str, redirect_uri: str, state: str, challenge: str) -> str:
    """Build the Google consent URL for the PKCE flow."""
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": GEMINI_OAUTH_SCOPE,
        "state": state,
        "access_type": "offline",
        "prompt": "consent",
        "code_challenge": challenge,
        "code_challenge_method": "S256",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


@dataclass(frozen=True)
class CallbackResult:
    """Query parameters delivered to the callback endpoint."""

    code: str = ""
    state: str = ""
    error: str = ""


class OAuthCallbackServer:
    """Local HTTP listener that accepts exactly one OAuth redirect.

    The first request to the callback path is handed to :meth:`wait` through
    a one-slot queue; later requests are answered but ignored.
    """

    def __init__(self, host: str = CALLBACK_HOST, port: int = CALLBACK_PORT):
        """Bind the listener.

        Raises:
            AuthenticationError: If the port cannot be bound.
        """
        self._results: queue.Queue[CallbackResult] = queue.Queue(maxsize=1)
        try:
            self._server = HTTPServer((host, port), self._make_handler())
        except OSError as e:
            raise AuthenticationError(f"cannot listen on {host}:{port}: {e}") from e
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def redirect_uri(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}{CALLBACK_PATH}"

    def _make_handler(self):
        results = self._results

        class CallbackHandler(BaseHTTPRequestHandler):
            def do_GET(self):
                parsed = urlparse(self.path)
                if parsed.path != CALLBACK_PATH:
                    self.send_error(404)
                    return

                params = parse_qs(parsed.query)
                result = CallbackResult(
                    code=params.get("code", [""])[0],
                    state=params.get("state", [""])[0],
                    error=params.get("error", [""])[0],
                )
                ok = bool(result.code and result.state and not result.error)
                try:
                    results.put_nowait(result)
                except queue.Full:
                    pass  # single-shot: only the first callback counts

                if ok:
                    page = _PAGE.format(heading="Authentication Successful!", detail="diffdraft is now logged in.")
                else:
                    detail = result.error or "Missing authorization code or state parameter."
                    page = _PAGE.format(heading="Authentication Failed", detail=detail)

                self.send_response(200 if ok else 400)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.end_headers()
                self.wfile.write(page.encode("utf-8"))

            def log_message(self, format, *args):
                logger.debug(f"OAuth callback: {format % args}")

        return CallbackHandler

    def start(self) -> "OAuthCallbackServer":
        self._thread.start()
        return self

    def wait(self, timeout: float = LOGIN_TIMEOUT) -> CallbackResult:
        """Block until the callback arrives.

        Raises:
            AuthenticationError: If nothing arrives within ``timeout`` seconds.
        """
        try:
            return self._results.get(timeout=timeout)
        except queue.Empty:
            raise AuthenticationError("authentication timeout - please try again") from None

    def close(self) -> None:
        self._server.shutdown()
        self._server.server_close()

    def __enter__(self) -> "OAuthCallbackServer":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def exchange_code(client_id: str, code: str, verifier: str, redirect_uri: str) -> OAuthToken:
    """Exchange an authorization code for a token.

    Raises:
        AuthenticationError: If the token endpoint rejects the exchange.
    """
    data = {
        "client_id": client_id,
        "code": code,
        "code_verifier": verifier,
        "grant_type": "authorization_code",
        "redirect_uri": redirect_uri,
    }
    try:
        response = httpx.post(GOOGLE_TOKEN_URL, data=data, timeout=30.0)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise AuthenticationError(f"failed to exchange code for token: {e}") from e

    expiry = None
    if payload.get("expires_in"):
        expiry = datetime.now(timezone.utc) + timedelta(seconds=int(payload["expires_in"]))

    try:
        return OAuthToken(
            access_token=payload["access_token"],
            token_type=payload.get("token_type", "Bearer"),
            refresh_token=payload.get("refresh_token"),
            expiry=expiry,
        )
    except (KeyError, ValidationError) as e:
        raise AuthenticationError(f"token endpoint returned an unexpected payload: {e}") from e


def authenticate(
    client_id: str,
    open_browser: Callable[[str], bool] = webbrowser.open,
    timeout: float = LOGIN_TIMEOUT,
    port: int = CALLBACK_PORT,
) -> OAuthToken:
    """Run the browser-based PKCE login flow.

    Args:
        client_id: OAuth client ID of a "Desktop app" Google client.
        open_browser: Opens the consent URL; returns False if it could not.
        timeout: Seconds to wait for the user to finish in the browser.
        port: Local port for the redirect listener.

    Returns:
        The new token (also written to the cache, best-effort).

    Raises:
        AuthenticationError: On denial, state mismatch, timeout or a failed
            code exchange, or when the callback port is taken.
    """
    verifier = generate_pkce_verifier()
    state = generate_state()

    with OAuthCallbackServer(port=port) as server:
        auth_url = build_auth_url(client_id, server.redirect_uri, state, pkce_challenge(verifier))

        print("Starting Google authentication...", file=sys.stderr)
        if not open_browser(auth_url):
            print("Could not open browser automatically.", file=sys.stderr)
            print(f"Please visit this URL in your browser:\n\n  {auth_url}\n", file=sys.stderr)
        print("Waiting for authentication...", file=sys.stderr)

        result = server.wait(timeout)

    if result.error or not result.code:
        raise AuthenticationError(f"authentication cancelled or failed: {result.error or 'no code received'}")

    if result.state != state:
        raise AuthenticationError("state mismatch - possible CSRF attack")

    token = exchange_code(client_id, result.code, verifier, server.redirect_uri)
    save_token_best_effort(token)
    return token
