# esputnik/common/http_client.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlencode

import requests
from requests.adapters import HTTPAdapter

from .config import DEFAULT_BASE_URL
from .errors import BAD_REQUEST, NOT_FOUND, UNAUTHORIZED, ESputnikError
from .logging import logger
from .logging_utils import shorten_body

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}

DEFAULT_CONNECT_TIMEOUT_S = 2.0


def build_session(user: str, password: str) -> requests.Session:
    """Session with JSON headers and basic auth; one attempt per call."""
    s = requests.Session()

    adapter = HTTPAdapter(max_retries=0)
    s.mount("https://", adapter)
    s.mount("http://", adapter)

    s.headers.update(DEFAULT_HEADERS)
    s.auth = (user, password)
    return s


@dataclass
class ApiResponse:
    """Outcome of a single call: status, decoded JSON body and headers."""

    status_code: int
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def header_int(self, name: str) -> int | None:
        raw = self.headers.get(name) if self.headers else None
        if raw is None or str(raw).strip() == "":
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None


def _decode(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    return resp.json()


class Transport:
    """HTTP layer of the connector.

    Builds ``base_url + path + ?query``, sends the JSON body when given and maps
    404/401/400 answers onto :class:`ESputnikError`. Any other HTTP error and
    every network-level failure propagate unchanged.
    """

    def __init__(
        self,
        user: str,
        password: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.connect_timeout = connect_timeout
        self._auth = (user, password)
        self.session = session or build_session(user, password)

    def close(self) -> None:
        self.session.close()

    def build_url(self, path: str, query: Mapping[str, Any] | None = None) -> str:
        url = self.base_url + path.lstrip("/")
        if query:
            url += "?" + urlencode(query)
        return url

    def request(
        self,
        method: str,
        path: str,
        query: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> ApiResponse:
        url = self.build_url(path, query)
        logger.debug({"esputnik": "request", "method": method, "path": path, "query": dict(query or {})})

        resp = self.session.request(
            method,
            url,
            json=json_body,
            headers=DEFAULT_HEADERS,
            auth=self._auth,
            # connect timeout only, reads may take as long as the API needs
            timeout=(self.connect_timeout, None),
        )

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            self._raise_mapped(e, method, path)

        logger.debug({"esputnik": "response", "method": method, "path": path, "status": resp.status_code})
        return ApiResponse(status_code=resp.status_code, data=_decode(resp), headers=resp.headers)

    def _raise_mapped(self, exc: requests.HTTPError, method: str, path: str) -> None:
        response = exc.response
        if response is None:
            raise exc

        status = response.status_code
        body = response.text or ""

        if status == NOT_FOUND:
            logger.debug({"esputnik": "not_found", "method": method, "path": path})
            raise ESputnikError("Not found", NOT_FOUND, body) from exc
        if status == UNAUTHORIZED:
            logger.error({"esputnik": "unauthorized", "method": method, "path": path})
            raise ESputnikError("Unauthorized", UNAUTHORIZED, body) from exc
        if status == BAD_REQUEST:
            logger.warning(
                {"esputnik": "request_error", "method": method, "path": path, "body": shorten_body(body)}
            )
            raise ESputnikError("Request error: " + body, BAD_REQUEST, body) from exc

        logger.error({"esputnik": "http_error", "method": method, "path": path, "status": status})
        raise exc
