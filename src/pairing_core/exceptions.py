from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class PairingError(Exception):
    message: str
    code: str = "pairing_error"
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, message: str, *, code: str | None = None, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.context = dict(context or {})

    def __str__(self) -> str:
        return self.message

    def as_log_fields(self) -> dict[str, Any]:
        return {
            "error_code": self.code,
            "error_message": self.message,
            "error_context": self.context,
        }


class ResourceError(PairingError):
    """Index allocation or stream open/create failure."""

    code = "resource_error"


class FormatError(PairingError):
    """A stream ended in the middle of a four-line record."""

    code = "format_error"

    def __init__(self, message: str, *, stream: str, path: str, record: int, offset: int) -> None:
        super().__init__(
            message,
            context={"stream": stream, "path": path, "record": record, "offset": offset},
        )


class ConfigValidationError(PairingError):
    code = "config_validation_error"


class YamlParseError(PairingError):
    code = "yaml_parse_error"
