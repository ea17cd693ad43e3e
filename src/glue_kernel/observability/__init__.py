from .logging import JsonlLogSink, LogMessage, LogSink, MemoryLogSink, StdoutLogSink, emit_log

__all__ = ["LogMessage", "LogSink", "StdoutLogSink", "JsonlLogSink", "MemoryLogSink", "emit_log"]
