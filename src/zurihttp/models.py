"""
models.py
---------
Pydantic schemas for the adapter's input document, the resolved request
configuration and the success payload.
"""
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

DEFAULT_METHOD = "GET"
DEFAULT_TIMEOUT = 30
DEFAULT_CONTENT_TYPE = "application/json"

# Leading decimal integer, the way a "%d" scan reads it
_TIMEOUT_RE = re.compile(r"\s*([+-]?[0-9]+)")
# A "%d" scan into a 64-bit int fails on overflow
TIMEOUT_MIN = -(2 ** 63)
TIMEOUT_MAX = 2 ** 63 - 1


class Param(BaseModel):
    inputname: str = ""
    compvalue: str = ""

    @field_validator("inputname", "compvalue", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


class InputDocument(BaseModel):
    params: Optional[List[Param]] = None

    @field_validator("params", mode="before")
    @classmethod
    def null_entries_as_empty(cls, value):
        if isinstance(value, list):
            return [{} if p is None else p for p in value]
        return value


def parse_timeout(value: str, current: int) -> int:
    match = _TIMEOUT_RE.match(value)
    if not match:
        return current
    timeout = int(match.group(1))
    if not TIMEOUT_MIN <= timeout <= TIMEOUT_MAX:
        return current
    return timeout


class RequestConfig(BaseModel):
    url: str = ""
    method: str = DEFAULT_METHOD
    headers: str = ""
    body: str = ""
    timeout: int = DEFAULT_TIMEOUT
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_params(cls, params: Optional[List[Param]]) -> "RequestConfig":
        """
        Resolve the named parameters in a single pass, in input order.
        Unknown names are ignored and a repeated name keeps its last value.
        A malformed timeout leaves the previous timeout in place.
        """
        url = ""
        method = ""
        headers = ""
        body = ""
        timeout = DEFAULT_TIMEOUT
        content_type = DEFAULT_CONTENT_TYPE

        for p in params or []:
            name, value = p.inputname, p.compvalue
            if name == "url":
                url = value.strip()
            elif name == "method":
                method = value.strip().upper()
            elif name == "headers":
                headers = value.strip()
            elif name == "body":
                body = value.strip()
            elif name == "timeout":
                timeout = parse_timeout(value, timeout)
            elif name == "contenttype":
                if value.strip():
                    content_type = value.strip()

        return cls(
            url=url,
            method=method or DEFAULT_METHOD,
            headers=headers,
            body=body,
            timeout=timeout,
            content_type=content_type,
        )


class CallResult(BaseModel):
    status_code: int
    status: str
    headers: Dict[str, List[str]] = {}
    body: Any = None
