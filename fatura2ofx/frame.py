"""Tabular view of a scraped statement for OFX writers.

The column names follow the contract OFX builders in this ecosystem read:
``date_parsed`` (UTC), ``amount_clean``, ``cleaned_desc``, ``trntype_norm``,
``fitid_norm`` and ``statement_end_date`` as the fallback posting timestamp.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from fatura2ofx.cleaning import clean_description
from fatura2ofx.date_time import to_utc_timestamp
from fatura2ofx.id import make_fitid
from fatura2ofx.models import OFXData
from fatura2ofx.rules import RuleSet
from fatura2ofx.trntype import infer_trntype_series

FRAME_COLUMNS: tuple[str, ...] = (
    "date_parsed",
    "amount_clean",
    "raw_desc",
    "cleaned_desc",
    "trntype_norm",
    "fitid_norm",
    "statement_end_date",
)

# Columns that must be present before handing the frame to an OFX writer.
REQUIRED_COLUMNS = {"amount_clean"}


def transactions_to_frame(ofx_data: OFXData, rules: Optional[RuleSet] = None) -> pd.DataFrame:
    """Return one row per scraped transaction, in statement order."""

    txns = ofx_data.bank_tran_list
    df = pd.DataFrame(
        {
            "date_parsed": pd.Series(
                [to_utc_timestamp(txn.dtposted) for txn in txns],
                dtype="datetime64[ns, UTC]",
            ),
            "amount_clean": pd.Series([txn.trnamt for txn in txns], dtype="float64"),
            "raw_desc": pd.Series([txn.memo for txn in txns], dtype="string"),
        }
    )

    df["cleaned_desc"] = df["raw_desc"].map(clean_description).astype("string")
    df["trntype_norm"] = infer_trntype_series(df["amount_clean"], df["raw_desc"], rules=rules)
    df["fitid_norm"] = pd.Series(
        [make_fitid(txn, idx) for idx, txn in enumerate(txns)], index=df.index, dtype="string"
    )
    df["statement_end_date"] = pd.Series(
        [to_utc_timestamp(ofx_data.due_date)] * len(df),
        index=df.index,
        dtype="datetime64[ns, UTC]",
    )
    return df[list(FRAME_COLUMNS)]


def assert_frame_ready(df: pd.DataFrame) -> None:
    """Validate that the DataFrame carries the fields an OFX writer requires."""

    missing = sorted(REQUIRED_COLUMNS - set(df.columns))
    if missing:
        missing_list = ", ".join(missing)
        raise ValueError(
            f"OFX generation requires the following columns: {missing_list}"
        )

    if not df["amount_clean"].notna().any():
        raise ValueError(
            "OFX generation requires at least one non-null 'amount_clean' value."
        )


__all__ = ["FRAME_COLUMNS", "assert_frame_ready", "transactions_to_frame"]
