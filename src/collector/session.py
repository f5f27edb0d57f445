"""Authenticated Graph session: token acquisition, GET helper, teardown."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

import requests
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import DeviceCodeCredential, InteractiveBrowserCredential

from src.shared.config_loader import CatalogConfig
from src.shared.errors import AuthenticationError, FetchError

log = logging.getLogger(__name__)


class GraphSession:
    """Bearer-authenticated HTTP session bound to one Graph scope.

    The session owns both the ``requests.Session`` and the credential
    that produced its token; ``close_session`` releases both.
    """

    def __init__(
        self,
        credential: Any,
        token: str,
        timeout_sec: float = 60.0,
        http: requests.Session | None = None,
    ) -> None:
        self.credential = credential
        self.timeout_sec = timeout_sec
        self.http = http or requests.Session()
        self.http.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            }
        )
        claims = _token_claims(token)
        self.account: str = (
            claims.get("upn")
            or claims.get("preferred_username")
            or claims.get("unique_name")
            or claims.get("appid")
            or "unknown"
        )
        self.tenant_id: str = claims.get("tid", "unknown")

    def get_json(self, url: str) -> dict[str, Any]:
        """GET *url* and return the decoded JSON object.

        Raises:
            requests.RequestException: On transport errors or non-2xx status.
            FetchError: If the body is not a JSON object.
        """
        resp = self.http.get(url, timeout=self.timeout_sec)
        resp.raise_for_status()
        try:
            body = resp.json()
        except ValueError as exc:
            raise FetchError(f"Response from {url} is not JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise FetchError(f"Response from {url} is not a JSON object")
        return body

    def close(self) -> None:
        self.http.close()
        close = getattr(self.credential, "close", None)
        if close is not None:
            close()


def _token_claims(token: str) -> dict[str, Any]:
    """Decode the JWT payload without verification (display only)."""
    try:
        payload = token.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        claims = json.loads(base64.urlsafe_b64decode(payload))
    except (IndexError, ValueError):
        return {}
    return claims if isinstance(claims, dict) else {}


def build_credential(config: CatalogConfig) -> Any:
    """Create the azure-identity credential selected by ``config.auth_mode``."""
    kwargs: dict[str, Any] = {}
    if config.tenant_id:
        kwargs["tenant_id"] = config.tenant_id
    if config.client_id:
        kwargs["client_id"] = config.client_id
    if config.auth_mode == "device_code":
        return DeviceCodeCredential(**kwargs)
    return InteractiveBrowserCredential(**kwargs)


def connect(config: CatalogConfig, credential: Any = None) -> GraphSession:
    """Acquire a token for ``config.scope`` and return a GraphSession.

    Raises:
        AuthenticationError: If the credential cannot be built or cannot
            produce a token.
    """
    log.info("Requesting token for scope %s (%s)", config.scope, config.auth_mode)
    try:
        if credential is None:
            credential = build_credential(config)
        access = credential.get_token(config.scope)
    except ClientAuthenticationError as exc:
        raise AuthenticationError(f"Authentication failed: {exc.message or exc}") from exc
    except ValueError as exc:
        raise AuthenticationError(f"Authentication failed: {exc}") from exc

    session = GraphSession(credential, access.token, timeout_sec=config.request_timeout_sec)
    log.debug("Connected as %s (tenant %s)", session.account, session.tenant_id)
    return session


def close_session(session: GraphSession | None) -> None:
    """Release the session. Never raises."""
    if session is None:
        return
    try:
        session.close()
        log.info("Graph session closed")
    except Exception as exc:  # noqa: BLE001
        log.warning("Failed to close Graph session: %s", exc)
