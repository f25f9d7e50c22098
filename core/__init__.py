"""
Core module for PrintFlow.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- sequence: Thread-safe ID counters
- record_codec: Pipe-delimited line format for data files
- data_file_manager: File I/O, backups, restore and retention
"""

from .exceptions import (
    PrintFlowError,
    InvalidOrderError,
    InsufficientMaterialError,
    InvalidMaterialError,
    RecordFormatError,
)
from .sequence import IdSequence
from .data_file_manager import DataFileManager

__all__ = [
    "PrintFlowError",
    "InvalidOrderError",
    "InsufficientMaterialError",
    "InvalidMaterialError",
    "RecordFormatError",
    "IdSequence",
    "DataFileManager",
]
