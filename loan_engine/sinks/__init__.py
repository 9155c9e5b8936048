"""Report sinks."""

from loan_engine.sinks.console import ConsoleSink
from loan_engine.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
