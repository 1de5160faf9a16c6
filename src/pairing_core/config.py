"""Run configuration.

Settings come from three layers, later ones winning: the defaults below, an
optional YAML file, and command line flags.
"""

from __future__ import annotations

import dataclasses
import json
from functools import cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft7Validator, FormatChecker

from pairing_core.exceptions import ConfigValidationError, YamlParseError
from pairing_core.index import DEFAULT_TABLE_SIZE

CONFIG_SCHEMA = "pairing_config"

_MAX_REPORTED_ERRORS = 10


@dataclasses.dataclass(frozen=True)
class PairingConfig:
    """Settings for one pairing run.

    Attributes:
        table_size: Number of hash buckets for the left-file index.
        deduplicate: Keep only the first record per canonical id in each file.
        split_at_whitespace: Cut header ids at the first space or tab.
        format_id: Rewrite output headers to ``<canonical id>1`` / ``<canonical id>2``.
        verbose: Log every normalized id and skipped duplicate.
        print_table_counts: Print the bucket occupancy after indexing.
        output_dir: Where outputs go (default: beside each input).
    """

    table_size: int = DEFAULT_TABLE_SIZE
    deduplicate: bool = False
    split_at_whitespace: bool = False
    format_id: bool = False
    verbose: bool = False
    print_table_counts: bool = False
    output_dir: Path | None = None

    def __post_init__(self) -> None:
        if isinstance(self.table_size, bool) or not isinstance(self.table_size, int) or self.table_size < 1:
            raise ConfigValidationError(
                f"table_size must be a positive integer, got {self.table_size!r}",
                context={"field": "table_size", "value": repr(self.table_size)},
            )
        if self.output_dir is not None and not isinstance(self.output_dir, Path):
            object.__setattr__(self, "output_dir", Path(self.output_dir))

    def with_overrides(self, **values: Any) -> PairingConfig:
        """Return a copy with every non-None value applied."""
        changes = {key: value for key, value in values.items() if value is not None}
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["output_dir"] = str(self.output_dir) if self.output_dir is not None else None
        return data


@cache
def load_schema(schema_name: str) -> dict[str, Any]:
    schema_path = resources.files("pairing_core").joinpath("schemas", f"{schema_name}.schema.json")
    return json.loads(schema_path.read_text(encoding="utf-8"))


def validate_config(config: Any, schema_name: str = CONFIG_SCHEMA, *, config_path: Path | None = None) -> None:
    schema = load_schema(schema_name)
    validator = Draft7Validator(schema, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(config), key=lambda exc: list(exc.path))
    if not errors:
        return
    location = str(config_path) if config_path else "<config>"
    lines = [f"Schema validation failed for {location} ({schema_name})."]
    error_details: list[dict[str, str]] = []
    for error in errors[:_MAX_REPORTED_ERRORS]:
        path = ".".join(str(p) for p in error.path) if error.path else "<root>"
        lines.append(f"- {path}: {error.message}")
        error_details.append({"path": path, "message": error.message})
    if len(errors) > _MAX_REPORTED_ERRORS:
        lines.append(f"... and {len(errors) - _MAX_REPORTED_ERRORS} more errors.")
    raise ConfigValidationError(
        "\n".join(lines),
        context={
            "path": location,
            "schema": schema_name,
            "errors": error_details,
            "truncated": len(errors) > _MAX_REPORTED_ERRORS,
        },
    )


def read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigValidationError(
            f"Can't read config file {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise YamlParseError(
            f"YAML parse error in {path}: {exc}",
            context={"path": str(path), "error": str(exc)},
        ) from exc
    return data if data is not None else {}


def load_config(path: Path | None = None, **overrides: Any) -> PairingConfig:
    """Build a :class:`PairingConfig` from an optional YAML file plus overrides."""
    values: dict[str, Any] = {}
    if path is not None:
        data = read_yaml(path)
        validate_config(data, config_path=path)
        values.update(data)
    if values.get("output_dir") is not None:
        output_dir = Path(values["output_dir"]).expanduser()
        if path is not None and not output_dir.is_absolute():
            output_dir = path.parent / output_dir
        values["output_dir"] = output_dir
    return PairingConfig(**values).with_overrides(**overrides)
