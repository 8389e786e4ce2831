"""Scrape an Itaú credit-card statement page into OFX-ready data.

``fatura2ofx`` is an explicit package so the root-level ``main.py`` driver and
the test-suite import the same modules when run from the repository root.
"""

__all__: list[str] = [
    "cleaning",
    "config",
    "date_time",
    "dom",
    "errors",
    "frame",
    "id",
    "layout",
    "models",
    "rules",
    "scrape",
    "trntype",
]
