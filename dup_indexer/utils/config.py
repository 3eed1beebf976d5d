"""Benchmark configuration: YAML loading and `dotted.key=value` overrides."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Iterable, Mapping, MutableMapping

import yaml


def load_config(config_path: Path | str) -> dict[str, Any]:
    """
    Read a YAML file whose top level is a mapping.

    An empty file yields an empty dict; any other top-level type is rejected.
    """
    path = Path(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ValueError(
            f"Configuration root in {path} must be a mapping, got {type(loaded).__name__}."
        )
    return dict(loaded)


def get_by_dotted_path(config: Mapping[str, Any], dotted_key: str, default: Any = None) -> Any:
    """Look up `a.b.c` in nested mappings, returning `default` when any part is absent."""
    node: Any = config
    for part in dotted_key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def set_by_dotted_path(config: MutableMapping[str, Any], dotted_key: str, value: Any) -> None:
    """
    Assign `value` at `a.b.c`, creating intermediate mappings as needed.

    Replacing a scalar with a nested section is refused, since it almost
    always means a mistyped override.

    Examples
    --------
    >>> cfg = {"bench": {"repeats": 100}}
    >>> set_by_dotted_path(cfg, "bench.repeats", 5)
    >>> cfg["bench"]["repeats"]
    5
    """
    *parents, leaf = dotted_key.split(".")
    node = config
    walked: list[str] = []
    for part in parents:
        walked.append(part)
        child = node.setdefault(part, {})
        if not isinstance(child, MutableMapping):
            raise TypeError(
                f"Cannot set '{dotted_key}': '{'.'.join(walked)}' holds a "
                f"{type(child).__name__}, not a section."
            )
        node = child
    node[leaf] = value


def parse_override(override: str) -> tuple[str, Any]:
    """
    Split a `dotted.key=value` override, parsing the value as YAML.

    >>> parse_override("bench.sizes=[10, 100]")
    ('bench.sizes', [10, 100])
    """
    dotted_key, sep, raw_value = override.partition("=")
    dotted_key = dotted_key.strip()
    if not sep or not dotted_key:
        raise ValueError(f"Override must look like 'dotted.key=value', got '{override}'.")
    return dotted_key, yaml.safe_load(raw_value)


def apply_overrides(config: Mapping[str, Any], overrides: Iterable[str]) -> dict[str, Any]:
    """Return a deep copy of `config` with every `dotted.key=value` override applied."""
    updated = copy.deepcopy(dict(config))
    for override in overrides:
        dotted_key, value = parse_override(override)
        set_by_dotted_path(updated, dotted_key, value)
    return updated
