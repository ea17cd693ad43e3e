from .backend import BackendState, BackendStateError, GlueBackend, current_backend

__all__ = ["BackendState", "BackendStateError", "GlueBackend", "current_backend"]
