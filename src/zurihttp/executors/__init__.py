# Re-export executors for easy access
from .base import BaseExecutor
from .http_exec import HTTPExecutor
