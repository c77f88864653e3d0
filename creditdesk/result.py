"""Result pattern for consistent return types in CreditDesk.

Document exports report their outcome through a Result instead of the
loose (success, path, mode) tuples a view would otherwise have to unpack.
"""
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Generic

T = TypeVar('T')


@dataclass
class Result(Generic[T]):
    """Represents the outcome of an operation.

    Attributes:
        success: Whether the operation succeeded.
        value: The return value on success, None on failure.
        error: Error message on failure, None on success.
        error_type: Type/category of error (e.g., "VALIDATION", "RENDER").
        mode: Optional qualifier of a successful outcome (e.g., "pdf", "html").

    Usage:
        result = projector.generate_pdf(plan_input, folder)
        if result:
            print(f"Saved to {result.value} ({result.mode})")
        else:
            print(f"Error: {result.error}")
    """
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    mode: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None, mode: str = None) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, value=value, mode=mode)

    @classmethod
    def fail(cls, error: str, error_type: str = None) -> 'Result[T]':
        """Create a failure result.

        Args:
            error: Error message describing what went wrong.
            error_type: Optional error category for programmatic handling.
        """
        return cls(success=False, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """Get the value, raising an exception if the operation failed.

        Raises:
            ValueError: If the operation failed.
        """
        if not self.success:
            raise ValueError(f"Result unwrap failed: {self.error}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the value or a default if the operation failed."""
        return self.value if self.success else default


# Common error types for consistency
class ErrorType:
    """Standard error type constants."""
    VALIDATION = "VALIDATION"
    RENDER = "RENDER"
    IO = "IO"
