"""Right-biased recursive merge of configuration layers.

# ─── MERGE POLICY ──────────────────────────────────────────────────────
#
# Sources are listed left to right in increasing precedence:
#
#   merge(defaults, overrides, env)
#
#   - mapping + mapping  → merged recursively, key by key
#   - anything else      → the later source's value wins outright
#   - lists              → replaced wholesale (never concatenated)
#
#   merge({"a": {"x": 1}}, {"a": {"y": 2}})  → {"a": {"x": 1, "y": 2}}
#   merge({"a": [1, 2]},   {"a": [3]})       → {"a": [3]}
#
# The result is freshly allocated: values are deep-copied out of the
# sources, so mutating the result never reaches back into an input.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any


def deep_merge(*sources: Mapping[str, Any]) -> dict[str, Any]:
    """Merge any number of mappings into a new dict, later sources winning.

    Args:
        *sources: Mappings in increasing order of precedence.

    Returns:
        A new dict containing the combined layers.

    Raises:
        TypeError: If a source is not a mapping.
    """
    result: dict[str, Any] = {}
    for index, source in enumerate(sources):
        if not isinstance(source, Mapping):
            raise TypeError(
                f"merge source #{index} must be a mapping, got {type(source).__name__}"
            )
        _merge_into(result, source)
    return result


def _merge_into(base: dict[str, Any], overrides: Mapping[str, Any]) -> None:
    """Recursively merge *overrides* into *base*, mutating only *base*."""
    for key, value in overrides.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        elif isinstance(value, Mapping):
            # Copy into a plain dict so nested merges never touch the source.
            fresh: dict[str, Any] = {}
            _merge_into(fresh, value)
            base[key] = fresh
        else:
            base[key] = deepcopy(value)
