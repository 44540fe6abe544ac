"""
errors.py
---------
Error taxonomy for a single adapter invocation.
Every error is terminal: the adapter writes str(error) as the "error" field and stops.
"""


class ExecutorError(Exception):
    prefix = ""

    def __init__(self, detail=""):
        self.detail = str(detail)
        super().__init__(self.detail)

    def __str__(self):
        if not self.prefix:
            return self.detail
        return f"{self.prefix}: {self.detail}"


class DecodeError(ExecutorError):
    prefix = "failed to decode input"


class ValidationError(ExecutorError):
    def __init__(self, detail="url parameter is required"):
        super().__init__(detail)


class RequestBuildError(ExecutorError):
    prefix = "failed to create request"


class TransportError(ExecutorError):
    prefix = "request failed"


class ResponseReadError(ExecutorError):
    prefix = "failed to read response"
