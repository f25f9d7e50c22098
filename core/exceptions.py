"""
Custom exceptions for PrintFlow.

Exception Hierarchy:
    PrintFlowError (base)
    ├── InvalidOrderError          - order rejected by validation or limits
    │   └── InsufficientMaterialError - not enough stock for the order
    ├── InvalidMaterialError       - material rejected by validation
    └── RecordFormatError          - a stored line could not be decoded

Usage:
    These are raised inside the domain and service layers only. The
    boundary methods (OrderService.submit_order, registry load/save,
    every DataFileManager operation) catch them, log them and hand back
    None/False/empty results, so nothing propagates to the GUI layer.
"""

from typing import Optional, Dict, Any


class PrintFlowError(Exception):
    """
    Base exception for all PrintFlow errors.

    Allows callers to catch every application-specific error with a
    single except clause.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidOrderError(PrintFlowError):
    """
    An order could not be placed.

    Typical causes:
    - missing material or blank dimensions
    - quantity not positive or above the configured maximum
    - order value above the configured maximum
    """

    def __init__(self, message: str = "Invalid order", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class InsufficientMaterialError(InvalidOrderError):
    """
    Not enough material in stock to fulfil an order.

    No stock is deducted when this is raised.
    """

    def __init__(self, material_name: str, required: int, available: int):
        message = (
            f"Insufficient material: {material_name}. "
            f"Required: {required}, Available: {available}"
        )
        details = {
            "material_name": material_name,
            "required": required,
            "available": available,
            "resolution": "Reduce the quantity or restock the material",
        }
        super().__init__(message, details)
        self.material_name = material_name
        self.required = required
        self.available = available


class InvalidMaterialError(PrintFlowError):
    """A material failed validation (name, cost, temperature or color)."""

    def __init__(self, material_name: Optional[str], validation_error: str):
        message = f"Invalid material '{material_name}': {validation_error}"
        super().__init__(message, {"material_name": material_name})
        self.material_name = material_name
        self.validation_error = validation_error


class RecordFormatError(PrintFlowError):
    """
    A line in a data file could not be decoded.

    Registries skip the offending line with a warning and keep loading.
    """

    def __init__(self, line: str, reason: str):
        super().__init__(f"Invalid record: {reason}", {"line": line})
        self.line = line
        self.reason = reason
