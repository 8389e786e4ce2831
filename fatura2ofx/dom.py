"""Read-only helpers over a BeautifulSoup document tree."""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from bs4 import BeautifulSoup, Tag

from fatura2ofx.errors import NotFoundError

T = TypeVar("T")

_PARSER = "html.parser"


def load_document(markup: Union[str, bytes]) -> BeautifulSoup:
    """Parse a saved statement page into a navigable tree."""
    return BeautifulSoup(markup, _PARSER)


def read_document(path: Path) -> BeautifulSoup:
    if not path.exists():
        raise FileNotFoundError(f"Statement page not found: {path}")
    return load_document(path.read_bytes())


def unique_by_identity(items: Iterable[T]) -> List[T]:
    """Drop repeated references, keeping each object where it first appeared.

    Identity rather than equality: BeautifulSoup compares tags by markup, so two
    distinct rows that happen to render the same would otherwise collapse.
    """
    seen: set[int] = set()
    result: List[T] = []
    for item in items:
        if id(item) in seen:
            continue
        seen.add(id(item))
        result.append(item)
    return result


def closest(node: Tag, names: Sequence[str]) -> Optional[Tag]:
    """Return *node* or its nearest ancestor whose tag name is in *names*."""
    if node.name in names:
        return node
    return node.find_parent(list(names))


def by_class(node: Tag, class_name: str) -> List[Tag]:
    return node.find_all(class_=class_name)


def first_by_class(node: Tag, class_name: str, what: str) -> Tag:
    found = node.find(class_=class_name)
    if found is None:
        raise NotFoundError(f"No {what} element with class {class_name!r}")
    return found


def text_of(node: Tag) -> str:
    return node.get_text()


__all__ = [
    "by_class",
    "closest",
    "first_by_class",
    "load_document",
    "read_document",
    "text_of",
    "unique_by_identity",
]
