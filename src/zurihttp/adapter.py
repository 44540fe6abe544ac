"""
adapter.py
----------
One invocation of the adapter as a pure function: raw input document in, output document out.
Decodes the params, resolves the request configuration, runs the HTTP executor and maps
every ExecutorError onto the {"error": ...} document.
"""
import json
import logging
from typing import Union

from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, ExecutorError, ValidationError
from .executors.http_exec import HTTPExecutor
from .models import InputDocument, RequestConfig

logger = logging.getLogger(__name__)


def decode_input(raw: Union[bytes, str]) -> InputDocument:
    """
    Decode the first JSON value of raw into an InputDocument.
    Content after that value is ignored; a null document has no params.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        data, _ = json.JSONDecoder().raw_decode(text.lstrip())
    except ValueError as e:
        raise DecodeError(e) from e
    if data is None:
        return InputDocument()
    try:
        return InputDocument.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(e) from e


def resolve(doc: InputDocument) -> RequestConfig:
    config = RequestConfig.from_params(doc.params)
    if not config.url:
        raise ValidationError()
    return config


def execute(raw: Union[bytes, str], executor: HTTPExecutor = None) -> dict:
    executor = executor or HTTPExecutor()
    try:
        config = resolve(decode_input(raw))
        return {"result": executor.execute(config, {})}
    except ExecutorError as e:
        logger.warning(str(e))
        return {"error": str(e)}
    except Exception as e:
        logger.exception("Unexpected error while executing request")
        return {"error": f"unexpected error: {e}"}
