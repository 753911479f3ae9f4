# storefront/services/identity_service.py
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List

import requests
from requests import RequestException

from storefront.domain.errors import TransientIOError
from storefront.utils.retry import http_retry
from storefront.utils.settings import AUTH_SERVICE_URL, AUTH_API_KEY, HTTP_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


@dataclass(frozen=True)
class IdentityChanged:
    identity: Identity | None


class IdentityClient:
    """HTTP client for the hosted auth service (GoTrue-style /user and /logout)."""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, timeout: int = HTTP_TIMEOUT_SECONDS):
        self.base_url = (base_url or AUTH_SERVICE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else AUTH_API_KEY
        self.timeout = timeout

    def _headers(self, token: str) -> dict:
        return {"apikey": self.api_key, "Authorization": f"Bearer {token}"}

    @http_retry()
    def fetch_user(self, token: str) -> Identity | None:
        url = f"{self.base_url}/user"
        logger.info(f"IdentityClient GET {url}")

        resp = requests.get(url, headers=self._headers(token), timeout=self.timeout)
        if resp.status_code in (401, 403):
            return None
        resp.raise_for_status()

        data = resp.json()
        return Identity(id=str(data["id"]), email=data.get("email") or "")

    @http_retry()
    def logout(self, token: str) -> None:
        url = f"{self.base_url}/logout"
        logger.info(f"IdentityClient POST {url}")

        resp = requests.post(url, headers=self._headers(token), timeout=self.timeout)
        if resp.status_code in (401, 403):
            return
        resp.raise_for_status()


Listener = Callable[[IdentityChanged], None]


class IdentityGate:
    """
    "Who is signed in" for the rest of the app.
    Always asks the auth service, nothing is cached between calls; listeners
    hear about sign-in, sign-out and account switches.

    One gate serves every request, so the last identity seen is tracked per
    token: requests of different users taking turns are not changes.
    """

    max_tracked_tokens = 10_000

    def __init__(self, client: IdentityClient | None = None):
        self.client = client or IdentityClient()
        self._listeners: List[Listener] = []
        self._seen: "OrderedDict[str, Identity]" = OrderedDict()
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, identity: Identity | None):
        event = IdentityChanged(identity)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Identity listener failed")

    def _observe(self, token: str, identity: Identity | None):
        with self._lock:
            previous = self._seen.get(token)
            if identity == previous:
                return
            if identity is None:
                del self._seen[token]
            else:
                self._seen[token] = identity
                self._seen.move_to_end(token)
                while len(self._seen) > self.max_tracked_tokens:
                    self._seen.popitem(last=False)
        self._emit(identity)

    def get_current_identity(self, token: str | None) -> Identity | None:
        if not token:
            return None
        try:
            identity = self.client.fetch_user(token)
        except RequestException as e:
            raise TransientIOError("Auth service unavailable") from e

        self._observe(token, identity)
        return identity

    def sign_out(self, token: str | None) -> None:
        if not token:
            return
        try:
            self.client.logout(token)
        except RequestException as e:
            raise TransientIOError("Auth service unavailable") from e

        with self._lock:
            self._seen.pop(token, None)
        self._emit(None)
