"""
base.py
-------
Defines the BaseExecutor interface for all request executors.
Executors raise ExecutorError subclasses; the adapter turns them into the error document.
"""
class BaseExecutor:
    def execute(self, params: dict, context: dict) -> dict:
        """
        params: resolved request configuration
        context: invocation-scoped values, unused by the built-in executors
        Returns: dict with result data
        """
        raise NotImplementedError
