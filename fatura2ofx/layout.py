"""Page layout variants of the statement page and how to tell them apart.

Two markups of the same page have been seen in the wild: one wraps every
transaction in its own ``<table>`` and prints ``"24 / abr"`` dates, the other
uses one ``<tbody>`` per transaction with full ``dd/mm/yy`` dates. Both are
described by a :class:`PageLayout`; :func:`detect_layout` picks the one whose
description marker is present in the document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from bs4 import Tag

from fatura2ofx.config import load_config_data
from fatura2ofx.date_time import DATE_FORMATS
from fatura2ofx.errors import LayoutNotIdentifiedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageLayout:
    """Marker classes and structure of one statement page variant."""

    name: str
    container_tags: tuple[str, ...]
    date_class: str
    description_class: str
    amount_class: str
    date_format: str = "auto"
    due_container_class: str = "c-category-status__venc"
    due_value_class: str = "c-category-status__value"
    hidden_attr: str = "aria-hidden"
    amount_span_tag: str = "span"

    def __post_init__(self) -> None:
        if self.date_format not in DATE_FORMATS:
            raise ValueError(
                f"Unsupported date format {self.date_format!r}; "
                f"expected one of {', '.join(DATE_FORMATS)}"
            )
        if not self.container_tags:
            raise ValueError("A page layout needs at least one container tag")

    @property
    def visible_span_selector(self) -> str:
        return f'{self.amount_span_tag}:not([{self.hidden_attr}="true"])'


TABLE_LAYOUT = PageLayout(
    name="table",
    container_tags=("table",),
    date_class="lancamento__data",
    description_class="lancamento__descricao",
    amount_class="lancamento__valor",
    date_format="day_month",
)

TBODY_LAYOUT = PageLayout(
    name="tbody",
    container_tags=("tbody",),
    date_class="c-table-transactions__date",
    description_class="c-table-transactions__description",
    amount_class="c-table-transactions__value",
    date_format="full",
)

# Probe order for detect_layout.
LAYOUTS: tuple[PageLayout, ...] = (TABLE_LAYOUT, TBODY_LAYOUT)


def get_layout(name: str, layouts: Sequence[PageLayout] = LAYOUTS) -> PageLayout:
    for layout in layouts:
        if layout.name == name:
            return layout
    known = ", ".join(layout.name for layout in layouts)
    raise ValueError(f"Unknown page layout {name!r}; expected one of {known}")


def detect_layout(doc: Tag, layouts: Sequence[PageLayout] = LAYOUTS) -> PageLayout:
    """Return the first layout whose description marker occurs in *doc*."""

    for layout in layouts:
        if doc.find(class_=layout.description_class) is not None:
            logger.debug("Detected page layout %r", layout.name)
            return layout
    raise LayoutNotIdentifiedError(
        "Statement page does not match any known layout",
        tried=tuple(layout.name for layout in layouts),
    )


def load_layout(
    config_path: Optional[Union[str, Path]] = None,
    *,
    base: PageLayout = TABLE_LAYOUT,
) -> PageLayout:
    """Load a :class:`PageLayout` from an optional JSON or YAML override file.

    The file may name a registered layout to start from (``"base": "tbody"``)
    and override any other field, e.g. a renamed amount class.
    """

    if config_path is None:
        return base

    overrides = load_config_data(Path(config_path), "layout")
    base_name = overrides.get("base")
    if base_name is not None:
        base = get_layout(str(base_name))
    return apply_layout_overrides(base, overrides)


def apply_layout_overrides(base: PageLayout, overrides: Mapping[str, Any]) -> PageLayout:
    """Create a new :class:`PageLayout` by applying *overrides* to *base*."""

    allowed = {f.name for f in fields(PageLayout)}
    changes: dict[str, Any] = {}
    for key, value in overrides.items():
        if key == "base":
            continue
        if key not in allowed:
            raise ValueError(f"Unknown page layout field: {key}")
        if key == "container_tags":
            value = _as_tag_tuple(value)
        elif not isinstance(value, str):
            raise TypeError(f"Page layout field {key!r} must be a string")
        changes[key] = value

    if not changes:
        return base
    return replace(base, **changes)


def _as_tag_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    raise TypeError("container_tags must be a string or a list of strings")


__all__ = [
    "LAYOUTS",
    "PageLayout",
    "TABLE_LAYOUT",
    "TBODY_LAYOUT",
    "apply_layout_overrides",
    "detect_layout",
    "get_layout",
    "load_layout",
]
