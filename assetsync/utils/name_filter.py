"""
Name filtering for include / exclude / refresh filter sets.

A filter set is a list of LiteralFilter, PatternFilter or PredicateFilter
evaluated with OR semantics. Plain values (strings, compiled patterns,
callables, YAML mappings) are converted once by ``to_filter`` at the
configuration boundary.
"""
import re
from typing import Any, Iterable, List, Sequence

from ..core.models import LiteralFilter, NameFilter, PatternFilter, PredicateFilter


def matches(name_filter: NameFilter, name: str) -> bool:
    """Test a single filter against a name"""
    if isinstance(name_filter, LiteralFilter):
        return name == name_filter.value
    if isinstance(name_filter, PatternFilter):
        return name_filter.pattern.search(name) is not None
    if isinstance(name_filter, PredicateFilter):
        result = name_filter.predicate(name)
        if not isinstance(result, bool):
            raise TypeError(
                f"Filter predicate must return a bool, got {type(result).__name__} for '{name}'"
            )
        return result
    raise TypeError(f"Unsupported filter: {name_filter!r}")


def passes(name: str, filter_set: Sequence[NameFilter], keep_on_match: bool = True) -> bool:
    """
    Decide whether a name survives a filter set.

    An empty set keeps every name, both for inclusion (keep_on_match=True)
    and exclusion (keep_on_match=False).
    """
    if not filter_set:
        return True
    matched = any(matches(f, name) for f in filter_set)
    return matched if keep_on_match else not matched


def filter_names(names: Iterable[str], filter_set: Sequence[NameFilter], keep_on_match: bool = True) -> List[str]:
    """Order-preserving filter over a list of names"""
    return [name for name in names if passes(name, filter_set, keep_on_match)]


def to_filter(value: Any) -> NameFilter:
    """Convert a configuration value into a filter"""
    if isinstance(value, (LiteralFilter, PatternFilter, PredicateFilter)):
        return value
    if isinstance(value, str):
        return LiteralFilter(value)
    if isinstance(value, re.Pattern):
        return PatternFilter(value)
    if isinstance(value, dict):
        if 'regex' in value:
            return PatternFilter(re.compile(value['regex']))
        if 'pattern' in value:
            return PatternFilter(re.compile(value['pattern']))
        if 'literal' in value:
            return LiteralFilter(str(value['literal']))
        raise ValueError(f"Filter mapping must have a 'regex', 'pattern' or 'literal' key: {value}")
    if callable(value):
        return PredicateFilter(value)
    raise ValueError(f"Unsupported filter value: {value!r}")


def to_filter_set(values: Any) -> List[NameFilter]:
    """Convert a list of configuration values; anything but a list yields an empty set"""
    if not isinstance(values, (list, tuple)):
        return []
    return [to_filter(v) for v in values]
