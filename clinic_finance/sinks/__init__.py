"""Output sinks for exporting engine results."""

from clinic_finance.sinks.console import ConsoleSink
from clinic_finance.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
