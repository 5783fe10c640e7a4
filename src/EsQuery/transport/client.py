"""Elasticsearch REST API client.

Issues JSON requests over a shared ``requests.Session``. Every request is
attempted exactly once; failures are raised as ``TransportError`` and retry
policy is left to the caller.
"""

from __future__ import annotations

import gzip
import json
import threading
from typing import Any, Mapping, Sequence
from urllib.parse import quote

import requests

from EsQuery.core.errors import NotFoundError, ScrollExhaustedError, TransportError
from EsQuery.utils.log import log

DEFAULT_TIMEOUT = 30.0
DEFAULT_DOC_TYPE = "_doc"

HEADERS = {
    "User-Agent": "esquery/0.1",
    "Accept": "application/json",
}


def split_names(value: str | Sequence[str]) -> list[str]:
    """Split a comma-separated host or index list into trimmed names."""
    items = value.split(",") if isinstance(value, str) else list(value)
    return [item.strip() for item in items if item and item.strip()]


class EsApiClient:
    """Low-level HTTP client for the Elasticsearch REST API.

    Hosts are used round-robin. Request bodies are gzip-compressed when
    ``compress`` is enabled.
    """

    def __init__(
        self,
        hosts: str | Sequence[str],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        compress: bool = True,
        username: str | None = None,
        password: str | None = None,
        verify_certs: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            hosts: Base URLs, as a list or a comma-separated string.
            timeout: Per-request timeout in seconds.
            compress: Whether to gzip request bodies.
            username: Optional basic-auth user.
            password: Optional basic-auth password.
            verify_certs: Whether to verify TLS certificates.
            session: Optional pre-built session (mainly for tests).

        Raises:
            ValueError: If no host is given.
        """
        self._hosts = [host.rstrip("/") for host in split_names(hosts)]
        if not self._hosts:
            raise ValueError("at least one host is required")
        self._timeout = timeout
        self._compress = compress
        self._session = session or requests.Session()
        self._session.verify = verify_certs
        if username:
            self._session.auth = (username, password or "")
        self._next = 0
        self._lock = threading.Lock()

    @property
    def hosts(self) -> tuple[str, ...]:
        return tuple(self._hosts)

    def close(self) -> None:
        """Close the underlying HTTP session and release pooled connections."""
        self._session.close()

    def __enter__(self) -> EsApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------ search

    def search(
        self,
        indices: Sequence[str],
        body: Mapping[str, Any],
        *,
        scroll: str | None = None,
    ) -> dict[str, Any]:
        params = {"scroll": scroll} if scroll else None
        return self._json("POST", f"/{_join(indices)}/_search", params=params, body=body)

    def scroll_next(self, scroll_id: str, *, scroll: str) -> dict[str, Any]:
        payload = self._json("POST", "/_search/scroll", body={"scroll": scroll, "scroll_id": scroll_id})
        hits = payload.get("hits", {}).get("hits")
        if isinstance(hits, list) and not hits:
            raise ScrollExhaustedError("scroll exhausted")
        return payload

    def clear_scroll(self, scroll_id: str) -> None:
        try:
            resp = self._request("DELETE", "/_search/scroll", body={"scroll_id": [scroll_id]})
            log.debug("Clear scroll: status=%s", resp.status_code)
        except TransportError as error:
            log.debug("Clear scroll failed, ignored: %s", error)

    # --------------------------------------------------------------- documents

    def get_document(
        self,
        index: str,
        doc_type: str,
        doc_id: str,
        *,
        source: bool | Mapping[str, Any] = True,
    ) -> dict[str, Any]:
        params: dict[str, str] = {}
        if source is False:
            params["_source"] = "false"
        elif isinstance(source, Mapping) and source.get("includes"):
            params["_source_includes"] = ",".join(source["includes"])

        resp = self._request("GET", _doc_path(index, doc_type, doc_id), params=params or None)
        if resp.status_code == 404:
            payload = _decode_json(resp)
            if payload.get("found") is False and "error" not in payload:
                raise NotFoundError(f"document {doc_id} not found in {index}", status=404)
        return self._checked(resp)

    def index_document(self, index: str, doc_type: str, doc_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        return self._json("PUT", _doc_path(index, doc_type, doc_id), body=body)

    def update_document(
        self, index: str, doc_type: str, doc_id: str, partial: Mapping[str, Any]
    ) -> dict[str, Any]:
        if doc_type == DEFAULT_DOC_TYPE:
            path = f"/{quote(index, safe='')}/_update/{quote(doc_id, safe='')}"
        else:
            path = f"{_doc_path(index, doc_type, doc_id)}/_update"
        return self._json("POST", path, body={"doc": dict(partial)})

    def delete_document(self, index: str, doc_type: str, doc_id: str) -> dict[str, Any]:
        return self._json("DELETE", _doc_path(index, doc_type, doc_id))

    # ------------------------------------------------------------------ admin

    def create_index(self, name: str, body: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return self._json("PUT", f"/{quote(name.strip(), safe='')}", body=body)

    def delete_index(self, names: str | Sequence[str]) -> dict[str, Any]:
        return self._json("DELETE", f"/{_join(split_names(names))}")

    def index_exists(self, name: str) -> bool:
        resp = self._request("HEAD", f"/{quote(name.strip(), safe='')}")
        if resp.status_code == 404:
            return False
        self._checked(resp)
        return True

    def ping(self) -> bool:
        """Return whether the cluster answers at all."""
        try:
            resp = self._request("HEAD", "/")
        except TransportError as error:
            log.debug("Ping failed: %s", error)
            return False
        return resp.status_code == 200

    def cluster_health(self) -> dict[str, Any]:
        return self._json("GET", "/_cluster/health")

    # --------------------------------------------------------------- plumbing

    def _json(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self._checked(self._request(method, path, params=params, body=body))

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> requests.Response:
        """Issue one HTTP request against the next host.

        Raises:
            TransportError: On connection errors and timeouts.
        """
        url = self._pick_host() + path
        headers = dict(HEADERS)
        data: bytes | None = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
            if self._compress:
                data = gzip.compress(data)
                headers["Content-Encoding"] = "gzip"

        log.debug("ES request: %s %s params=%s bytes=%s", method, url, params, len(data) if data else 0)
        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as error:
            raise TransportError(f"{method} {path} failed: {error}") from error
        log.debug("ES response: %s %s status=%s", method, path, resp.status_code)
        return resp

    def _checked(self, resp: requests.Response) -> dict[str, Any]:
        if resp.status_code >= 400:
            raise _error_from_response(resp)
        return _decode_json(resp)

    def _pick_host(self) -> str:
        with self._lock:
            host = self._hosts[self._next % len(self._hosts)]
            self._next += 1
        return host


def _join(names: Sequence[str]) -> str:
    joined = ",".join(quote(name, safe="") for name in names)
    return joined or "_all"


def _doc_path(index: str, doc_type: str, doc_id: str) -> str:
    return f"/{quote(index, safe='')}/{quote(doc_type, safe='')}/{quote(doc_id, safe='')}"


def _decode_json(resp: requests.Response) -> dict[str, Any]:
    if not resp.content:
        return {}
    try:
        payload = resp.json()
    except ValueError as error:
        raise TransportError(f"invalid JSON response (HTTP {resp.status_code})", status=resp.status_code) from error
    if not isinstance(payload, dict):
        raise TransportError(f"unexpected response payload (HTTP {resp.status_code})", status=resp.status_code)
    return payload


def _error_from_response(resp: requests.Response) -> TransportError:
    """Build a TransportError from an engine error payload."""
    reason = resp.reason or "error"
    error_type: str | None = None
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            error_type = error.get("type")
            reason = error.get("reason") or reason
        elif isinstance(error, str):
            reason = error
    message = f"HTTP {resp.status_code}: {reason}"
    if error_type:
        message += f" [type={error_type}]"
    return TransportError(message, status=resp.status_code, error_type=error_type)
