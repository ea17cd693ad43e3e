from .dispatcher import Dispatcher
from .timeout import GlueTimeoutError, InvocationWrapperError, run_with_timeout

__all__ = ["Dispatcher", "GlueTimeoutError", "InvocationWrapperError", "run_with_timeout"]
