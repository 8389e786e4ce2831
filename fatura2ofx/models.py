"""Records produced by the scraper and handed to an OFX writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict


@dataclass(frozen=True)
class StmtTrn:
    """One statement transaction (OFX ``STMTTRN``).

    ``trnamt`` is signed: charges are positive, payments and credits negative.
    """

    dtposted: date
    memo: str
    trnamt: float

    def as_dict(self) -> Dict[str, Any]:
        return {"DTPOSTED": self.dtposted, "MEMO": self.memo, "TRNAMT": self.trnamt}


@dataclass(frozen=True)
class OFXData:
    """Everything scraped from one statement page."""

    dtserver: datetime
    due_date: date
    bank_tran_list: tuple[StmtTrn, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        """Return the mapping consumed by OFX writers (``DTSERVER``, ``dueDate``,
        ``BANKTRANLIST``)."""

        return {
            "DTSERVER": self.dtserver,
            "dueDate": self.due_date,
            "BANKTRANLIST": [txn.as_dict() for txn in self.bank_tran_list],
        }


__all__ = ["StmtTrn", "OFXData"]
