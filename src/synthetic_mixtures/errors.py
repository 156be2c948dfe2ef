"""
Exception types shared by the mixture-generation pipeline.

ConfigurationError covers unsupported option values and references to
metadata that does not exist. ValidationError covers structural mismatches
between the tables handed from one pipeline stage to the next.
"""

from typing import List, Optional


class _MixtureError(ValueError):
    """Base class carrying an optional field name and suggested fixes."""

    def __init__(
        self, message: str, field: Optional[str] = None, suggestions: Optional[List[str]] = None
    ):
        self.field = field
        self.suggestions = suggestions or []
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        lines = [message]
        if self.field:
            lines.append(f"Field: {self.field}")
        if self.suggestions:
            lines.append("\nSuggested fixes:")
            for i, s in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {s}")
        return "\n".join(lines)


class ConfigurationError(_MixtureError):
    """Exception raised for invalid or unsupported configuration values."""


class ValidationError(_MixtureError):
    """Exception raised when collaborating tables do not line up."""
