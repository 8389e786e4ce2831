"""Extraction of the due date and transactions from a statement page.

Usage::

    from fatura2ofx.dom import load_document
    from fatura2ofx.scrape import scrape_ofx_data

    doc = load_document(html)
    ofx_data = scrape_ofx_data(doc)
    ofx_data.due_date            # datetime.date(2020, 7, 15)
    ofx_data.bank_tran_list[0]   # StmtTrn(dtposted=..., memo=..., trnamt=...)

The document is only read. A row that cannot be parsed aborts the whole
scrape, and the error message names the row's 1-based position.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from bs4 import Comment, Tag

from fatura2ofx.cleaning import clean_memo, has_amount, parse_amount
from fatura2ofx.date_time import parse_due_date, parse_transaction_date
from fatura2ofx.dom import by_class, closest, first_by_class, text_of, unique_by_identity
from fatura2ofx.errors import AmbiguousMatchError, NotFoundError, ParseError, ScrapeError
from fatura2ofx.layout import PageLayout, TABLE_LAYOUT, detect_layout
from fatura2ofx.models import OFXData, StmtTrn

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def scrape_ofx_data(
    doc: Tag,
    *,
    layout: Optional[PageLayout] = None,
    clock: Clock = _utcnow,
) -> OFXData:
    """Scrape the whole statement: server time, due date and transactions.

    *clock* supplies ``DTSERVER``; tests pass a fixed one. When *layout* is
    omitted it is detected from the document.
    """

    layout = layout or detect_layout(doc)
    due_date = scrape_due_date(doc, layout=layout)
    transactions = scrape_bank_tran_list(doc, layout=layout, due_date=due_date)
    return OFXData(
        dtserver=clock(),
        due_date=due_date,
        bank_tran_list=tuple(transactions),
    )


def scrape_due_date(doc: Tag, *, layout: PageLayout = TABLE_LAYOUT) -> date:
    container = first_by_class(doc, layout.due_container_class, "due-date")
    value = first_by_class(container, layout.due_value_class, "due-date value")
    due_date = parse_due_date(text_of(value))
    logger.debug("Statement due date: %s", due_date.isoformat())
    return due_date


def find_transaction_containers(doc: Tag, layout: PageLayout) -> List[Tag]:
    """Return the distinct transaction containers in document order.

    Several description cells may sit in the same container; each container is
    kept once, at the position of its first description cell.
    """

    containers = []
    for cell in by_class(doc, layout.description_class):
        container = closest(cell, layout.container_tags)
        if container is None:
            raise NotFoundError(
                f"Description cell {clean_memo(text_of(cell))!r} is not inside any "
                f"of: {', '.join(layout.container_tags)}"
            )
        containers.append(container)

    unique = unique_by_identity(containers)
    logger.debug(
        "Found %d transaction containers (%d description cells)",
        len(unique),
        len(containers),
    )
    return unique


def scrape_bank_tran_list(
    doc: Tag,
    *,
    layout: Optional[PageLayout] = None,
    due_date: Optional[date] = None,
) -> List[StmtTrn]:
    """Scrape every transaction; partial dates take the due date's year."""

    layout = layout or detect_layout(doc)
    if due_date is None:
        due_date = scrape_due_date(doc, layout=layout)

    transactions = []
    for position, node in enumerate(find_transaction_containers(doc, layout), start=1):
        try:
            transactions.append(
                scrape_stmt_trn_from_node(node, due_date.year, layout=layout)
            )
        except ScrapeError as exc:
            logger.error("Could not scrape transaction #%d: %s", position, exc)
            raise type(exc)(f"Transaction #{position}: {exc}") from exc
    return transactions


def scrape_stmt_trn_from_node(
    node: Tag,
    year: int,
    *,
    layout: PageLayout = TABLE_LAYOUT,
) -> StmtTrn:
    date_cell = first_by_class(node, layout.date_class, "transaction date")
    memo_cell = first_by_class(node, layout.description_class, "transaction description")
    return StmtTrn(
        dtposted=parse_transaction_date(text_of(date_cell), year, layout.date_format),
        memo=clean_memo(text_of(memo_cell)),
        trnamt=scrape_amount(node, layout=layout),
    )


def _hidden_within(node: Tag, cell: Tag, layout: PageLayout) -> bool:
    """True when *node*, or an ancestor up to and including *cell*, is hidden."""
    while node is not None:
        if node.get(layout.hidden_attr) == "true":
            return True
        if node is cell:
            return False
        node = node.parent
    return False


def _visible_text(node: Tag, cell: Tag, layout: PageLayout) -> str:
    return "".join(
        string
        for string in node.find_all(string=True)
        if not isinstance(string, Comment) and not _hidden_within(string.parent, cell, layout)
    )


def _amount_candidates(cell: Tag, layout: PageLayout) -> List[str]:
    if _hidden_within(cell, cell, layout):
        raise AmbiguousMatchError(f"Amount cell is marked {layout.hidden_attr}=\"true\"")

    spans = cell.find_all(layout.amount_span_tag)
    if not spans:
        return [_visible_text(cell, cell, layout)]

    visible = [
        span
        for span in cell.select(layout.visible_span_selector)
        if not _hidden_within(span, cell, layout)
    ]
    if not visible:
        raise AmbiguousMatchError(
            f"Amount cell only holds spans marked {layout.hidden_attr}=\"true\""
        )
    # A wrapper span reads its children's visible text, so a currency symbol in
    # its own span stays next to the figure.
    return [_visible_text(span, cell, layout) for span in visible]


def scrape_amount(node: Tag, *, layout: PageLayout = TABLE_LAYOUT) -> float:
    """Return the signed amount of one transaction container.

    Dual-currency rows repeat the figure in a hidden span; only visible text is
    considered, and the first span (or span-less cell) holding a decimal-comma
    number wins.
    """

    cells = by_class(node, layout.amount_class)
    if not cells:
        raise NotFoundError(f"No transaction amount element with class {layout.amount_class!r}")

    tried = []
    ambiguous: Optional[AmbiguousMatchError] = None
    for cell in cells:
        try:
            candidates = _amount_candidates(cell, layout)
        except AmbiguousMatchError as exc:
            ambiguous = exc
            continue
        for candidate in candidates:
            if has_amount(candidate):
                return parse_amount(candidate)
            tried.append(candidate.strip())

    if ambiguous is not None and not tried:
        raise ambiguous
    raise ParseError(f"No decimal-comma amount among {tried!r}")


__all__ = [
    "find_transaction_containers",
    "scrape_amount",
    "scrape_bank_tran_list",
    "scrape_due_date",
    "scrape_ofx_data",
    "scrape_stmt_trn_from_node",
]
