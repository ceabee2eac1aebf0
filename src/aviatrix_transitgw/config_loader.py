from __future__ import annotations

import os
import re
import typing as t
from pathlib import Path

import yaml
from pydantic import ValidationError

from . import schema
from .config_template import SCHEMA_VERSION
from .errors import ConfigValidationError

ROOT_KEY = "transit_gateway"

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z0-9_]+)\}")


def _resolve_placeholders(text: str, missing: set[str]) -> str:
    """Substitute ${VAR} in one gateway attribute; unset or empty vars land in ``missing``."""
    def from_env(match: re.Match[str]) -> str:
        value = os.environ.get(match.group(1), "")
        if not value:
            missing.add(match.group(1))
            return match.group(0)
        return value

    return _PLACEHOLDER.sub(from_env, text)


def _expand_env(node: t.Any, missing: set[str]) -> t.Any:
    # Attribute values and tag_list entries only; mapping keys are attribute names
    if isinstance(node, str):
        return _resolve_placeholders(node, missing)
    if isinstance(node, list):
        return [_expand_env(item, missing) for item in node]
    if isinstance(node, dict):
        return {key: _expand_env(value, missing) for key, value in node.items()}
    return node


def format_validation_error(e: ValidationError) -> str:
    errors = []
    for err in e.errors():
        loc = " -> ".join(str(x) for x in err["loc"])
        errors.append(f"  • {loc}: {err['msg']}")
    return "Configuration validation failed:\n" + "\n".join(errors)


def parse_config(raw: t.Any) -> schema.TransitGatewayConfig:
    """Validate an already-loaded YAML document."""
    if not isinstance(raw, dict):
        raise ConfigValidationError("Configuration root must be a mapping")

    version = raw.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ConfigValidationError(
            f"Unsupported config version {version!r}; expected {SCHEMA_VERSION}"
        )

    body = raw.get(ROOT_KEY)
    if not isinstance(body, dict):
        raise ConfigValidationError(f"Missing '{ROOT_KEY}' section")

    missing: set[str] = set()
    expanded = _expand_env(body, missing)
    if missing:
        # Surface all missing vars at once to help the user export them.
        raise ConfigValidationError(
            "Missing environment variables for placeholders: "
            + ", ".join(sorted(missing))
        )

    try:
        return schema.validate_config(expanded)
    except ValidationError as e:
        raise ConfigValidationError(
            format_validation_error(e)
            + "\n\nPlease fix these errors and try again. "
            "Run 'aviatrix-transitgw validate-config <file>' to validate without applying."
        ) from e


def load_local_config(path: Path) -> schema.TransitGatewayConfig:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {path}: {e}") from e
    return parse_config(raw)
