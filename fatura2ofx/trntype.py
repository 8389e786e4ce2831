"""Transaction-type inference for scraped statement rows.

Credit-card statements list charges as positive amounts and payments or
refunds as negative ones, so the sign fallback is the reverse of a checking
account: positive is ``DEBIT``, negative is ``CREDIT``. A zero amount
carries no direction and is ``OTHER``.
"""

from typing import Optional

import numpy as np
import pandas as pd

from fatura2ofx.rules import DEFAULT_RULES, RuleSet


_OFX_TYPE_WHITELIST = {
    "CASH",
    "INT",
    "DIV",
    "FEE",
    "SRVCHG",
    "DEP",
    "ATM",
    "POS",
    "XFER",
    "CHECK",
    "PAYMENT",
    "DIRECTDEP",
    "DIRECTDEBIT",
    "REPEATPMT",
    "OTHER",
    "CREDIT",
    "DEBIT",
}


def infer_trntype_series(
    amount: pd.Series,
    description: Optional[pd.Series] = None,
    rules: Optional[RuleSet] = None,
) -> pd.Series:
    """Infer OFX ``TRNTYPE`` values from memos first, then from the amount sign."""

    rules = rules or DEFAULT_RULES
    idx = amount.index
    desc_series = (
        description if description is not None else pd.Series(pd.NA, index=idx)
    )
    # Plain strings: compiled patterns go through ``re`` whatever the string backend.
    haystack = ["" if pd.isna(text) else str(text).strip() for text in desc_series]

    result = pd.Series(pd.NA, index=idx, dtype="string")
    pending = result.isna()
    for regex_pattern, output in rules.rules_regex:
        if not pending.any():
            break
        if output not in _OFX_TYPE_WHITELIST:
            raise ValueError(f"Rule output {output!r} is not an OFX transaction type")
        matched = pd.Series(
            [regex_pattern.search(text) is not None for text in haystack], index=idx
        )
        mask = pending & matched
        result.loc[mask] = output
        pending = result.isna()

    if pending.any():
        numeric_amounts = pd.to_numeric(amount, errors="coerce")
        other_mask = pending & numeric_amounts.isna()
        result.loc[other_mask] = "OTHER"
        pending = result.isna()
        if pending.any():
            amt_values = numeric_amounts.loc[pending]
            result.loc[pending] = np.select(
                [amt_values > 0, amt_values < 0], ["DEBIT", "CREDIT"], default="OTHER"
            )

    return result.fillna("OTHER")


__all__ = ["infer_trntype_series"]
