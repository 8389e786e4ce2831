"""
main.py

Scrape saved Itaú credit-card statement pages ("faturas"), print the due date
and the transactions in the column layout OFX writers consume.

Usage:
    pip3 install -e .  # installs beautifulsoup4, pandas, numpy, pyyaml
    python main.py fatura.html [outra-fatura.html ...]

Environment:
    FATURA_LAYOUT       force a page layout by name ("table" or "tbody");
                        detected from the page when unset
    FATURA_LAYOUT_FILE  JSON/YAML overrides for the page layout's marker classes
    FATURA_RULES_FILE   JSON/YAML overrides for transaction type rules
    FATURA_LOG_LEVEL    enable library logging at this level (e.g. DEBUG)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import pandas as pd

from fatura2ofx.dom import read_document
from fatura2ofx.frame import assert_frame_ready, transactions_to_frame
from fatura2ofx.layout import PageLayout, detect_layout, get_layout, load_layout
from fatura2ofx.rules import RuleSet, load_rules
from fatura2ofx.scrape import scrape_ofx_data


def _resolve_layout(doc, layout_name: Optional[str], layout_file: Optional[str]) -> PageLayout:
    base = get_layout(layout_name) if layout_name else detect_layout(doc)
    if layout_file:
        return load_layout(layout_file, base=base)
    return base


def _process_page(
    path: Path,
    *,
    layout_name: Optional[str] = None,
    layout_file: Optional[str] = None,
    rules: Optional[RuleSet] = None,
) -> Optional[pd.DataFrame]:
    if not path.exists():
        print(f"Skipping {path}; file not found")
        return None

    try:
        doc = read_document(path)
        layout = _resolve_layout(doc, layout_name, layout_file)
        ofx_data = scrape_ofx_data(doc, layout=layout)
        df = transactions_to_frame(ofx_data, rules=rules)
        if not df.empty:
            assert_frame_ready(df)
    except (ValueError, TypeError) as exc:  # pragma: no cover - CLI feedback
        print(f"Error scraping {path}: {exc}")
        return None

    total = float(df["amount_clean"].sum()) if not df.empty else 0.0
    print(
        f"{path.name}: layout={layout.name} due={ofx_data.due_date.isoformat()} "
        f"transactions={len(df)} total={total:.2f}"
    )
    return df


def main(
    paths: list[Path],
    *,
    layout_name: Optional[str] = None,
    layout_file: Optional[str] = None,
    rules_file: Optional[str] = None,
) -> int:
    rules = load_rules(rules_file) if rules_file else None
    failures = 0
    for path in paths:
        df = _process_page(
            path, layout_name=layout_name, layout_file=layout_file, rules=rules
        )
        if df is None:
            failures += 1
            continue
        if not df.empty:
            with pd.option_context("display.width", 160, "display.max_columns", None):
                print(df.drop(columns=["fitid_norm", "statement_end_date"]).to_string(index=False))
    return 1 if failures else 0


if __name__ == '__main__':
    log_level = os.environ.get('FATURA_LOG_LEVEL')
    if log_level:
        logging.basicConfig(level=log_level.upper())

    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    sys.exit(
        main(
            [Path(arg).expanduser() for arg in sys.argv[1:]],
            layout_name=os.environ.get('FATURA_LAYOUT') or None,
            layout_file=os.environ.get('FATURA_LAYOUT_FILE') or None,
            rules_file=os.environ.get('FATURA_RULES_FILE') or None,
        )
    )
