"""Rule configuration helpers for transaction type inference."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Pattern, Tuple, Union

from fatura2ofx.config import load_config_data


@dataclass(frozen=True)
class RuleSet:
    """Ordered ``(pattern, TRNTYPE)`` pairs matched against statement memos."""

    rules_regex: Tuple[Tuple[Pattern, str], ...]


# Statement memos are Portuguese; the first matching rule wins.
_DEFAULT_RULES_REGEX = (
    (re.compile(r"\bPAGAMENTO\b", re.I), "PAYMENT"),
    (re.compile(r"\b(?:ESTORNO|CR[EÉ]DITO|DEVOLU[CÇ][AÃ]O)\b", re.I), "CREDIT"),
    (re.compile(r"\b(?:IOF|ANUIDADE|TARIFA)\b", re.I), "FEE"),
    (re.compile(r"\b(?:JUROS|ENCARGOS|MULTA)\b", re.I), "INT"),
    (re.compile(r"\bSAQUE\b", re.I), "CASH"),
)

DEFAULT_RULES = RuleSet(rules_regex=tuple(_DEFAULT_RULES_REGEX))

# Inline flags a rule file may set; memos are single-line, so these suffice.
_FLAG_MAP = {
    "I": re.IGNORECASE,
    "IGNORECASE": re.IGNORECASE,
    "M": re.MULTILINE,
    "MULTILINE": re.MULTILINE,
    "S": re.DOTALL,
    "DOTALL": re.DOTALL,
}


def load_rules(
    config_path: Optional[Union[str, Path]] = None,
    *,
    base_rules: RuleSet = DEFAULT_RULES,
) -> RuleSet:
    """Load a :class:`RuleSet` from an optional JSON or YAML configuration file."""

    if config_path is None:
        return base_rules

    overrides = load_config_data(Path(config_path), "rule")
    return apply_rule_overrides(base_rules, overrides)


def apply_rule_overrides(base_rules: RuleSet, overrides: Mapping[str, Any]) -> RuleSet:
    """Create a new :class:`RuleSet` by applying overrides to *base_rules*.

    ``rules_regex`` is either a list (replaces the defaults) or a mapping with
    ``replace`` and/or ``extend`` lists.
    """

    override = (overrides or {}).get("rules_regex")
    if override is None:
        return base_rules

    if not isinstance(override, Mapping):
        override = {"replace": override}

    rules = list(base_rules.rules_regex)
    if "replace" in override:
        rules = [_parse_regex_rule(item) for item in _as_list(override["replace"])]
    rules.extend(_parse_regex_rule(item) for item in _as_list(override.get("extend")))
    return RuleSet(rules_regex=tuple(rules))


def _parse_regex_rule(entry: Any) -> Tuple[Pattern, str]:
    if isinstance(entry, Mapping):
        pattern = entry.get("pattern")
        output = entry.get("trntype") or entry.get("output")
        flags = entry.get("flags")
    elif isinstance(entry, (list, tuple)):
        if len(entry) < 2:
            raise ValueError("Regex rule entries must have at least two elements")
        pattern, output, *rest = entry
        flags = rest[0] if rest else None
    else:
        raise TypeError("Rule entries must be mappings or sequences")

    if pattern is None or output is None:
        raise ValueError("Regex rule entries require 'pattern' and 'trntype'/'output'")

    compiled = re.compile(str(pattern), _parse_regex_flags(flags))
    return compiled, str(output).upper()


def _parse_regex_flags(flags: Any) -> int:
    if flags is None:
        return re.IGNORECASE

    result = 0
    for token in _as_list(flags):
        name = str(token).upper()
        if name not in _FLAG_MAP:
            raise ValueError(f"Unsupported regex flag: {token}")
        result |= _FLAG_MAP[name]
    return result


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


__all__ = [
    "RuleSet",
    "DEFAULT_RULES",
    "load_rules",
    "apply_rule_overrides",
]
