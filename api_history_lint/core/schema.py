"""Schema loading and validation for decoded history values."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from api_history_lint.core.errors import LintConfigError

logger = logging.getLogger(__name__)


class HistorySchema:
    """A checked JSON schema plus the validator class its ``$schema`` asks for."""

    def __init__(self, schema: dict[str, Any], source: str = "<inline>") -> None:
        validator_cls = validator_for(schema, default=Draft202012Validator)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as exc:
            raise LintConfigError(f"invalid schema {source}: {exc.message}") from exc
        self._validator = validator_cls(schema)

    @classmethod
    def from_path(cls, path: Path) -> "HistorySchema":
        """Load a JSON (or YAML) schema file. Any failure is a configuration error."""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise LintConfigError(f"cannot read schema file {path}: {exc}") from exc
        try:
            if path.suffix.lower() in (".yaml", ".yml"):
                schema = yaml.safe_load(text)
            else:
                schema = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise LintConfigError(f"cannot parse schema file {path}: {exc}") from exc
        if not isinstance(schema, dict):
            raise LintConfigError(f"schema file {path} must contain an object")
        logger.debug(f"Loaded schema from {path}")
        return cls(schema, source=str(path))

    def errors(self, value: Any) -> list[dict[str, Any]]:
        """Return every validation error as ``{instancePath, keyword, message, params}``."""
        found = sorted(
            self._validator.iter_errors(value),
            key=lambda error: [str(item) for item in error.absolute_path],
        )
        return [
            {
                "instancePath": "".join(f"/{item}" for item in error.absolute_path),
                "keyword": error.validator,
                "message": error.message,
                "params": _json_safe(error.validator_value),
            }
            for error in found
        ]


def _json_safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)
    return value


__all__ = ["HistorySchema"]
