"""Loading and validation of the YAML query status table.

The packaged table maps every status tag the camera reports to a field of
``QueryStatus`` and a value kind. Users can add or override rules with
their own YAML files under the XDG config/data directories.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from datetime import timedelta
from enum import Enum
from functools import lru_cache
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from goproctl.core.errors import StatusTableLoadError, StatusTableValidationError
from goproctl.core.model import QueryStatus

LOGGER = logging.getLogger(__name__)


class ValueKind(str, Enum):
    BOOL = "bool"
    UINT = "uint"
    DURATION = "duration"
    BYTESIZE = "bytesize"
    TEXT = "text"
    UNSUPPORTED = "unsupported"


DURATION_UNITS: dict[str, timedelta] = {
    "milliseconds": timedelta(milliseconds=1),
    "seconds": timedelta(seconds=1),
    "minutes": timedelta(minutes=1),
}

BYTESIZE_UNITS: dict[str, int] = {
    "bytes": 1,
    "kilobytes": 1 << 10,
    "megabytes": 1 << 20,
}

# Field annotation each kind may write into
_KIND_FIELD_TYPES: dict[ValueKind, tuple[str, ...]] = {
    ValueKind.BOOL: ("bool",),
    ValueKind.UINT: ("int",),
    ValueKind.DURATION: ("timedelta",),
    ValueKind.BYTESIZE: ("int",),
    ValueKind.TEXT: ("str",),
}

_STATUS_FIELDS = {f.name: str(f.type) for f in fields(QueryStatus)}


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise StatusTableValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class StatusRule:
    tag: int
    field: str
    kind: ValueKind
    unit: str | None = None

    @property
    def duration_unit(self) -> timedelta:
        return DURATION_UNITS[self.unit or ""]

    @property
    def bytesize_unit(self) -> int:
        return BYTESIZE_UNITS[self.unit or ""]


@dataclass(frozen=True)
class StatusTable:
    rules: dict[int, StatusRule]
    warnings: tuple[str, ...] = ()

    def get(self, tag: int) -> StatusRule | None:
        return self.rules.get(tag)

    def field_for(self, tag: int) -> str | None:
        rule = self.rules.get(tag)
        return rule.field if rule else None


@lru_cache(maxsize=1)
def _load_schema_validator() -> Any:
    schema_path = resources.files("goproctl") / "schemas" / "status_table.schema.json"
    schema_text = schema_path.read_text(encoding="utf-8")
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _table_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "goproctl/statuses", xdg_data / "goproctl/statuses"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StatusTableLoadError(f"Could not read status table {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise StatusTableValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise StatusTableValidationError(f"Status table {path} must contain a mapping at root")
    return loaded


def _build_rule(entry: dict[str, Any], source: Path | Traversable) -> StatusRule:
    rule = StatusRule(
        tag=int(entry["tag"]),
        field=entry["field"],
        kind=ValueKind(entry["kind"]),
        unit=entry.get("unit"),
    )
    annotation = _STATUS_FIELDS.get(rule.field)
    if annotation is None:
        raise StatusTableValidationError(
            f"Status {rule.tag} in {source} names unknown field '{rule.field}'"
        )
    allowed = _KIND_FIELD_TYPES.get(rule.kind)
    if allowed is not None and annotation not in allowed:
        raise StatusTableValidationError(
            f"Status {rule.tag} in {source}: kind '{rule.kind.value}' cannot write "
            f"field '{rule.field}' of type {annotation}"
        )
    return rule


def _build_rules(doc: dict[str, Any], source: Path | Traversable) -> dict[int, StatusRule]:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise StatusTableValidationError(
            f"Schema validation failed for {source}{where}: {exc.message}"
        ) from exc

    rules: dict[int, StatusRule] = {}
    seen_fields: dict[str, int] = {}
    for entry in doc["statuses"]:
        rule = _build_rule(entry, source)
        if rule.tag in rules:
            raise StatusTableValidationError(f"Status {rule.tag} is defined twice in {source}")
        if rule.field in seen_fields:
            raise StatusTableValidationError(
                f"Field '{rule.field}' is mapped by both status {seen_fields[rule.field]} "
                f"and status {rule.tag} in {source}"
            )
        seen_fields[rule.field] = rule.tag
        rules[rule.tag] = rule
    return rules


def _packaged_table_path() -> Traversable:
    return resources.files("goproctl") / "tables" / "query_statuses.yaml"


def _iter_user_table_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _table_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_status_table() -> StatusTable:
    """Load the packaged status table merged with any user tables."""
    packaged = _packaged_table_path()
    rules = _build_rules(_read_yaml(packaged), packaged)
    warnings: list[str] = []

    for path in _iter_user_table_paths():
        for tag, rule in _build_rules(_read_yaml(path), path).items():
            if tag in rules:
                warning = f"User status table {path.name} overrides status {tag} ({rules[tag].field})"
                LOGGER.warning(warning)
                warnings.append(warning)
            rules[tag] = rule

    return StatusTable(rules=rules, warnings=tuple(warnings))


@lru_cache(maxsize=1)
def default_status_table() -> StatusTable:
    return load_status_table()
