"""
http_exec.py
------------
Implements HTTPExecutor, which issues the single outbound HTTP request of an invocation.
Builds the request from a RequestConfig, sends it under one deadline, buffers the body
and classifies it as JSON or plain text.
"""
import json
import logging
import re
import threading
from typing import Dict, List, Optional, Tuple

import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_environ_proxies

from .base import BaseExecutor
from ..errors import RequestBuildError, ResponseReadError, TransportError
from ..models import CallResult, RequestConfig
from ..utils.text import scrub_json

logger = logging.getLogger(__name__)

BODYLESS_METHODS = {"GET", "DELETE"}
CONTENT_TYPE_METHODS = {"POST", "PUT", "PATCH"}
READ_CHUNK_SIZE = 64 * 1024
# Longer timeouts overflow socket and lock timeouts; they mean no deadline
MAX_TIMEOUT = 10 ** 9

# RFC 7230 token, used for both methods and header names
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def parse_headers(raw: str) -> List[Tuple[str, str]]:
    """
    Split "Key: value, Other: value" into (key, value) pairs.
    Segments without a colon or with an empty key are skipped; only the first
    colon separates key from value.
    """
    pairs = []
    if not raw:
        return pairs
    for segment in raw.split(","):
        key, sep, value = segment.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        pairs.append((key, value.strip()))
    return pairs


def canonical_header_key(name: str) -> str:
    if not _TOKEN_RE.fullmatch(name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def effective_timeout(timeout: int) -> Optional[int]:
    """Seconds to wait for the whole exchange, or None for no deadline."""
    if timeout <= 0 or timeout > MAX_TIMEOUT:
        return None
    return timeout


def _reject_constant(name):
    raise ValueError(f"invalid JSON literal {name}")


def parse_body(raw: bytes):
    """Return the decoded JSON value of raw, or raw as text when it is not JSON."""
    try:
        return scrub_json(json.loads(raw, parse_constant=_reject_constant))
    except ValueError:
        return raw.decode("utf-8", errors="replace")


def collect_headers(response: requests.Response) -> Dict[str, List[str]]:
    collected: Dict[str, List[str]] = {}
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        for name in raw_headers.keys():
            collected.setdefault(canonical_header_key(name), []).extend(raw_headers.getlist(name))
        return collected
    for name, value in response.headers.items():
        collected.setdefault(canonical_header_key(name), []).append(value)
    return collected


class HTTPExecutor(BaseExecutor):
    def build_request(self, config: RequestConfig, session: Optional[requests.Session] = None) -> requests.PreparedRequest:
        method = config.method
        if not _TOKEN_RE.fullmatch(method):
            raise RequestBuildError(f"invalid method {method!r}")

        # Case-insensitive so a custom Content-Type replaces the default
        headers = CaseInsensitiveDict()
        if method in CONTENT_TYPE_METHODS:
            headers["Content-Type"] = config.content_type
        for key, value in parse_headers(config.headers):
            if not _TOKEN_RE.fullmatch(key):
                raise RequestBuildError(f"invalid header field name {key!r}")
            try:
                value.encode("latin-1")
            except UnicodeEncodeError as e:
                raise RequestBuildError(f"invalid header value for {key!r}: {e}") from e
            headers[key] = value

        request = requests.Request(
            method=method,
            url=config.url,
            headers=headers,
            data=None if method in BODYLESS_METHODS else config.body.encode("utf-8"),
        )

        try:
            if session is not None:
                return session.prepare_request(request)
            return request.prepare()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise RequestBuildError(e) from e

    def send(self, session: requests.Session, prepared: requests.PreparedRequest, timeout: Optional[float]) -> requests.Response:
        """Send prepared and return once the response headers have arrived."""
        try:
            return session.send(
                prepared,
                timeout=timeout,
                stream=True,
                allow_redirects=True,
                proxies=get_environ_proxies(prepared.url),
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(e) from e

    def read_body(self, response: requests.Response) -> bytes:
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                chunks.append(chunk)
        except requests.exceptions.RequestException as e:
            raise ResponseReadError(e) from e
        finally:
            response.close()
        return b"".join(chunks)

    def call(self, config: RequestConfig) -> CallResult:
        timeout = effective_timeout(config.timeout)
        session = requests.Session()
        # The input document alone shapes the request: no netrc credentials, no CA bundle overrides
        session.trust_env = False
        try:
            prepared = self.build_request(config, session)
            logger.info(f"HTTP {prepared.method} {prepared.url} (timeout={timeout}s)")
            response, raw = Exchange(self, session, prepared, timeout).run()
        finally:
            session.close()

        status = f"{response.status_code} {response.reason or ''}".strip()
        logger.info(f"HTTP {prepared.method} {prepared.url} -> {status}, {len(raw)} bytes")
        return CallResult(
            status_code=response.status_code,
            status=status,
            headers=collect_headers(response),
            body=parse_body(raw),
        )

    def execute(self, params, context=None):
        config = params if isinstance(params, RequestConfig) else RequestConfig(**params)
        return self.call(config).model_dump()


class Exchange:
    """
    Runs send and read_body on a daemon thread so that a single deadline bounds
    the whole exchange: connect, request, response headers and body.

    When the deadline passes the response and session are closed and the thread
    is abandoned; the process exits after its one request, so nothing waits on it.
    """

    def __init__(self, executor: HTTPExecutor, session: requests.Session,
                 prepared: requests.PreparedRequest, timeout: Optional[float]):
        self.executor = executor
        self.session = session
        self.prepared = prepared
        self.timeout = timeout
        self.response = None
        self.body = None
        self.error = None

    def _run(self):
        try:
            self.response = self.executor.send(self.session, self.prepared, self.timeout)
            self.body = self.executor.read_body(self.response)
        except Exception as e:
            self.error = e

    def run(self) -> Tuple[requests.Response, bytes]:
        thread = threading.Thread(target=self._run, name="zurihttp-exchange", daemon=True)
        thread.start()
        thread.join(self.timeout)
        if thread.is_alive():
            self.abort()
            if self.response is None:
                raise TransportError(f"timeout of {self.timeout}s exceeded while awaiting headers")
            raise ResponseReadError(f"timeout of {self.timeout}s exceeded while reading body")
        if self.error is not None:
            raise self.error
        return self.response, self.body

    def abort(self):
        try:
            if self.response is not None:
                self.response.close()
            self.session.close()
        except OSError as e:
            logger.debug(f"Error while closing timed out exchange: {e}")
