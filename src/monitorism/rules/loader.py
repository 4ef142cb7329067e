"""Load rule sets from YAML.

A rule file looks like::

    configuration:
      - name: "Safe owner changes"
        priority: "P1"
        addresses: ["0x..."]
        events:
          - signature: "AddedOwner(address owner)"

The path may be a single file or a directory; a directory contributes every
`*.yaml` / `*.yml` file below it, in sorted order. Any failure raises
`ConfigurationError`: the monitor must not start with a partial rule set.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from monitorism.core.errors import ConfigurationError, InvalidSignature
from monitorism.rules.specs import EventEntry, Rule, RuleSet, normalize_address

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def _address_from_yaml_int(value: int) -> str:
    """YAML resolves an unquoted `0x...` to an int; render it back as 20 bytes."""
    if isinstance(value, bool) or not 0 <= value < 2**160:
        raise ValueError(f"{value!r} is not an address; quote addresses in rule files")
    return f"0x{value:040x}"


class EventModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    signature: str


class RuleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    priority: str
    addresses: Sequence[str] = Field(default_factory=list)
    events: Sequence[EventModel] = Field(min_length=1)

    @field_validator("addresses", mode="before")
    @classmethod
    def _coerce_addresses(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [_address_from_yaml_int(a) if isinstance(a, int) else a for a in v]
        return v

    @field_validator("addresses")
    @classmethod
    def _valid_addresses(cls, v: Sequence[str]) -> list[str]:
        return [normalize_address(a) for a in v]


class RuleFile(BaseModel):
    configuration: Sequence[RuleModel] = Field(default_factory=list)


def rule_from_model(model: RuleModel) -> Rule:
    """Resolve every signature of a validated rule; raises InvalidSignature."""
    return Rule(
        name=model.name,
        priority=model.priority,
        events=tuple(EventEntry.from_signature(e.signature) for e in model.events),
        addresses=frozenset(model.addresses),
    )


def _rule_files(path: Path) -> list[Path]:
    if path.is_dir():
        files = sorted(p for p in path.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES)
        if not files:
            raise ConfigurationError(f"No YAML rule files found in {path}")
        return files
    if path.is_file():
        return [path]
    raise ConfigurationError(f"Rule path does not exist: {path}")


def _load_yaml(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read rule file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed YAML in {path}: {e}") from e


def parse_rules(data: Any, *, source: str = "<memory>") -> list[Rule]:
    """Validate an already-parsed document and build its rules."""
    if data is None:
        raise ConfigurationError(f"Rule file {source} is empty")
    try:
        doc = RuleFile.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid rule file {source}: {e}") from e

    rules: list[Rule] = []
    for model in doc.configuration:
        try:
            rules.append(rule_from_model(model))
        except InvalidSignature as e:
            raise ConfigurationError(f"Rule {model.name!r} in {source}: {e}") from e
    return rules


def load_rule_set(path: Path | str) -> RuleSet:
    """Load one file or a directory of files into a single RuleSet."""
    path = Path(path)
    rules: list[Rule] = []
    for file in _rule_files(path):
        file_rules = parse_rules(_load_yaml(file), source=str(file))
        logger.debug("Loaded %d rule(s) from %s", len(file_rules), file)
        rules.extend(file_rules)
    return RuleSet.of(rules)


def rule_set_from_dicts(entries: Iterable[dict[str, Any]]) -> RuleSet:
    """Build a RuleSet from in-memory `configuration` entries."""
    return RuleSet.of(parse_rules({"configuration": list(entries)}))
