# Re-export main modules and objects for easier imports
from .adapter import execute
from .config import settings
from .errors import (
    ExecutorError, DecodeError, ValidationError, RequestBuildError, TransportError, ResponseReadError
)
from .executors import BaseExecutor, HTTPExecutor
from .models import Param, InputDocument, RequestConfig, CallResult
