import hashlib

from fatura2ofx.date_time import ofx_datetime
from fatura2ofx.models import StmtTrn


# ---------- ids ----------
def make_fitid(txn: StmtTrn, idx: int) -> str:
    """Deterministic FITID for a scraped row; *idx* separates identical charges."""
    parts = [
        ofx_datetime(txn.dtposted) or "",
        f"{txn.trnamt:.2f}",
        txn.memo[:64],
        str(idx),
    ]
    return hashlib.md5("|".join(parts).encode()).hexdigest().upper()
