from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from fatura2ofx.dom import load_document, read_document
from fatura2ofx.errors import AmbiguousMatchError, LayoutNotIdentifiedError, NotFoundError, ParseError
from fatura2ofx.layout import TABLE_LAYOUT, TBODY_LAYOUT, apply_layout_overrides
from fatura2ofx.models import OFXData, StmtTrn
from fatura2ofx.scrape import (
    find_transaction_containers,
    scrape_amount,
    scrape_bank_tran_list,
    scrape_due_date,
    scrape_ofx_data,
    scrape_stmt_trn_from_node,
)

EXAMPLES_DIR = Path(__file__).resolve().parents[1] / "examples"
FIXED_NOW = datetime(2020, 7, 1, 12, 30, tzinfo=timezone.utc)

DUE = '<div class="c-category-status__venc"><span class="c-category-status__value">{}</span></div>'


def _row(date_text, memo, amount_html):
    return (
        '<table><tr>'
        f'<td class="lancamento__data">{date_text}</td>'
        f'<td class="lancamento__descricao">{memo}</td>'
        f'<td class="lancamento__valor">{amount_html}</td>'
        '</tr></table>'
    )


@pytest.fixture
def sample_doc():
    return read_document(EXAMPLES_DIR / "fatura.sample.html")


@pytest.fixture
def tbody_doc():
    return read_document(EXAMPLES_DIR / "fatura-tbody.sample.html")


def test_scrape_ofx_data_end_to_end(sample_doc):
    ofx_data = scrape_ofx_data(sample_doc, clock=lambda: FIXED_NOW)

    assert isinstance(ofx_data, OFXData)
    assert ofx_data.dtserver == FIXED_NOW
    assert ofx_data.due_date == date(2020, 7, 15)

    txns = ofx_data.bank_tran_list
    assert len(txns) == 4
    assert [t.memo for t in txns] == [
        "PAGAMENTO EFETUADO",
        "Amazon Br         03/04",
        "Tim*61981548988",
        "Pinboard",
    ]
    assert [t.trnamt for t in txns] == pytest.approx([-10823.97, 58.14, 15, 127.82])
    assert [t.dtposted.isoformat() for t in txns] == [
        "2020-06-17",
        "2020-04-23",
        "2020-06-06",
        "2020-07-06",
    ]


def test_scrape_ofx_data_as_dict(sample_doc):
    result = scrape_ofx_data(sample_doc, clock=lambda: FIXED_NOW).as_dict()

    assert set(result) == {"DTSERVER", "dueDate", "BANKTRANLIST"}
    assert result["DTSERVER"] == FIXED_NOW
    assert result["dueDate"] == date(2020, 7, 15)
    assert result["BANKTRANLIST"][0] == {
        "DTPOSTED": date(2020, 6, 17),
        "MEMO": "PAGAMENTO EFETUADO",
        "TRNAMT": pytest.approx(-10823.97),
    }


def test_scrape_ofx_data_default_clock_is_current_utc(sample_doc):
    before = datetime.now(timezone.utc)
    ofx_data = scrape_ofx_data(sample_doc)

    assert ofx_data.dtserver.tzinfo is not None
    assert (ofx_data.dtserver - before).total_seconds() < 1


def test_scrape_ofx_data_does_not_modify_document(sample_doc):
    before = str(sample_doc)
    scrape_ofx_data(sample_doc, clock=lambda: FIXED_NOW)

    assert str(sample_doc) == before


def test_scrape_ofx_data_is_repeatable(sample_doc):
    first = scrape_ofx_data(sample_doc, clock=lambda: FIXED_NOW)
    second = scrape_ofx_data(sample_doc, clock=lambda: FIXED_NOW)

    assert first == second


def test_tbody_layout_with_full_dates(tbody_doc):
    ofx_data = scrape_ofx_data(tbody_doc, clock=lambda: FIXED_NOW)

    assert ofx_data.due_date == date(2022, 1, 10)
    assert ofx_data.bank_tran_list == (
        StmtTrn(dtposted=date(2021, 12, 28), memo="Padaria Real", trnamt=1234.56),
        StmtTrn(dtposted=date(2022, 1, 2), memo="Estorno Loja X", trnamt=-52.30),
    )


def test_explicit_layout_skips_detection(tbody_doc):
    # The table layout's description marker is not on this page.
    assert scrape_bank_tran_list(tbody_doc, layout=TABLE_LAYOUT) == []
    assert len(scrape_bank_tran_list(tbody_doc)) == 2


def test_scrape_due_date_ignores_other_status_values(sample_doc):
    # The statement total also carries c-category-status__value.
    assert scrape_due_date(sample_doc) == date(2020, 7, 15)


def test_scrape_due_date_missing_marker():
    doc = load_document('<div class="c-category-status__total"><span class="c-category-status__value">R$ 1,00</span></div>')

    with pytest.raises(NotFoundError, match="due-date"):
        scrape_due_date(doc)


def test_scrape_due_date_missing_value():
    doc = load_document('<div class="c-category-status__venc"><span>15/07/20</span></div>')

    with pytest.raises(NotFoundError, match="due-date value"):
        scrape_due_date(doc)


def test_scrape_due_date_unparseable():
    doc = load_document(DUE.format("15 de julho"))

    with pytest.raises(ParseError):
        scrape_due_date(doc)


def test_duplicate_description_cells_collapse_to_first_occurrence():
    doc = load_document(
        DUE.format("15/07/20")
        + '<table id="a"><tr><td class="lancamento__data">01 / jul</td>'
        '<td class="lancamento__descricao">Primeira</td>'
        '<td class="lancamento__valor">R$ 1,00</td></tr>'
        '<tr><td class="lancamento__descricao">detalhe</td></tr></table>'
        + _row("02 / jul", "Segunda", "R$ 2,00")
    )

    containers = find_transaction_containers(doc, TABLE_LAYOUT)

    assert len(containers) == 2
    assert containers[0] is doc.find(id="a")
    txns = scrape_bank_tran_list(doc)
    assert [t.memo for t in txns] == ["Primeira", "Segunda"]


def test_identical_rows_are_not_merged():
    row = _row("05 / jul", "Uber", "R$ 9,90")
    doc = load_document(DUE.format("15/07/20") + row + row)

    txns = scrape_bank_tran_list(doc)

    assert len(txns) == 2
    assert txns[0] == txns[1]


def test_partial_dates_take_due_date_year():
    # A December charge on a January statement still gets the due date's year.
    doc = load_document(DUE.format("10/01/21") + _row("28 / dez", "Natal", "R$ 100,00"))

    txns = scrape_bank_tran_list(doc)

    assert txns[0].dtposted == date(2021, 12, 28)


def test_description_outside_container():
    doc = load_document(DUE.format("15/07/20") + '<div class="lancamento__descricao">solto</div>')

    with pytest.raises(NotFoundError, match="not inside any of: table"):
        scrape_bank_tran_list(doc, layout=TABLE_LAYOUT)


def test_empty_statement():
    doc = load_document(DUE.format("15/07/20"))

    ofx_data = scrape_ofx_data(doc, layout=TABLE_LAYOUT, clock=lambda: FIXED_NOW)

    assert ofx_data.bank_tran_list == ()


def test_empty_statement_without_layout_cannot_be_detected():
    doc = load_document(DUE.format("15/07/20"))

    with pytest.raises(LayoutNotIdentifiedError):
        scrape_ofx_data(doc, clock=lambda: FIXED_NOW)


def test_dual_currency_row_uses_visible_span():
    node = load_document(
        _row(
            "06 / jul",
            "Pinboard",
            '<span aria-hidden="true">US$ 22,00</span><span>R$ 127,82</span>',
        )
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_dual_currency_row_hidden_span_last():
    node = load_document(
        _row(
            "06 / jul",
            "Pinboard",
            '<span>R$ 127,82</span><span aria-hidden="true">US$ 22,00</span>',
        )
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_amount_skips_spans_inside_hidden_wrapper():
    node = load_document(
        _row(
            "06 / jul",
            "Pinboard",
            '<span><span aria-hidden="true"><span>US$ 22,00</span></span>'
            '<span class="vazio"></span><span>R$ 127,82</span></span>',
        )
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_amount_all_spans_hidden():
    node = load_document(
        _row("06 / jul", "Pinboard", '<span aria-hidden="true">US$ 22,00</span>')
    ).find("table")

    with pytest.raises(AmbiguousMatchError):
        scrape_amount(node)


def test_amount_without_decimal_comma_value():
    node = load_document(_row("06 / jul", "Pinboard", "<span>--</span>")).find("table")

    with pytest.raises(ParseError, match="No decimal-comma amount"):
        scrape_amount(node)


def test_amount_cell_missing():
    node = load_document(
        '<table><tr><td class="lancamento__data">06 / jul</td>'
        '<td class="lancamento__descricao">Pinboard</td></tr></table>'
    ).find("table")

    with pytest.raises(NotFoundError, match="amount"):
        scrape_stmt_trn_from_node(node, 2020)


def test_date_cell_missing():
    node = load_document(
        '<table><tr><td class="lancamento__descricao">Pinboard</td>'
        '<td class="lancamento__valor">R$ 1,00</td></tr></table>'
    ).find("table")

    with pytest.raises(NotFoundError, match="transaction date"):
        scrape_stmt_trn_from_node(node, 2020)


def test_bad_row_aborts_scrape_and_names_position():
    doc = load_document(
        DUE.format("15/07/20")
        + _row("01 / jul", "Ok", "R$ 1,00")
        + _row("02 / xyz", "Mes invalido", "R$ 2,00")
    )

    with pytest.raises(ParseError, match=r"Transaction #2: Unknown month abbreviation: 'xyz'"):
        scrape_bank_tran_list(doc)


def test_scrape_stmt_trn_from_node_with_custom_layout():
    layout = apply_layout_overrides(
        TBODY_LAYOUT, {"amount_class": "valor", "date_format": "day_month"}
    )
    node = load_document(
        '<table><tbody><tr><td class="c-table-transactions__date">3 / mar</td>'
        '<td class="c-table-transactions__description"> Livraria </td>'
        '<td class="valor">R$ 45,90</td></tr></tbody></table>'
    ).find("tbody")

    txn = scrape_stmt_trn_from_node(node, 2024, layout=layout)

    assert txn == StmtTrn(dtposted=date(2024, 3, 3), memo="Livraria", trnamt=45.90)


def test_amount_falls_through_to_next_cell():
    node = load_document(
        '<table><tr><td class="lancamento__data">06 / jul</td>'
        '<td class="lancamento__descricao">Pinboard</td>'
        '<td class="lancamento__valor"><span aria-hidden="true">US$ 22,00</span></td>'
        '<td class="lancamento__valor">R$ 127,82</td></tr></table>'
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_amount_with_currency_symbol_in_own_span():
    node = load_document(
        _row("06 / jul", "Pinboard", '<span><span class="moeda">R$</span> 127,82</span>')
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_amount_ignores_hidden_child_of_visible_span():
    node = load_document(
        _row(
            "06 / jul",
            "Pinboard",
            '<span>R$ 127,82<span aria-hidden="true">US$ 22,00</span></span>',
        )
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_hidden_amount_cell_is_skipped():
    node = load_document(
        '<table><tr><td class="lancamento__data">06 / jul</td>'
        '<td class="lancamento__descricao">Pinboard</td>'
        '<td class="lancamento__valor" aria-hidden="true">US$ 22,00</td>'
        '<td class="lancamento__valor"><span>R$ 127,82</span></td></tr></table>'
    ).find("table")

    assert scrape_amount(node) == pytest.approx(127.82)


def test_only_amount_cell_hidden():
    node = load_document(
        '<table><tr><td class="lancamento__data">06 / jul</td>'
        '<td class="lancamento__descricao">Pinboard</td>'
        '<td class="lancamento__valor" aria-hidden="true"><span>US$ 22,00</span></td>'
        '</tr></table>'
    ).find("table")

    with pytest.raises(AmbiguousMatchError, match="Amount cell is marked"):
        scrape_amount(node)
