"""
Output modules for netprobe
"""

from .console import ConsoleOutput, ProgressReporter
from .json_export import JsonExporter, JsonSink

__all__ = ['ConsoleOutput', 'ProgressReporter', 'JsonExporter', 'JsonSink']
