"""
HotelSphere Accounting — Ledger Reports
=========================================
Read-side summaries over the transactions table.

All amounts are integer minor units. Nothing here writes; the
front desk records receipts, accounting only adds them up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from core.primitives.hotel import DateLike, Transaction, TransactionType, as_date

LIABILITY_GROUPS = frozenset({"Capital", "Current Liability"})


# ══════════════════════════════════════════════════════════════
# RESULT TYPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerSummary:
    income: int
    expense: int
    assets: int
    liabilities: int

    @property
    def net_profit(self) -> int:
        return self.income - self.expense

    def to_dict(self) -> dict:
        return {
            "income": self.income,
            "expense": self.expense,
            "net_profit": self.net_profit,
            "assets": self.assets,
            "liabilities": self.liabilities,
        }


@dataclass(frozen=True)
class CashBook:
    entries: Tuple[Transaction, ...]
    ins: int
    outs: int

    @property
    def balance(self) -> int:
        return self.ins - self.outs


# ══════════════════════════════════════════════════════════════
# REPORTS
# ══════════════════════════════════════════════════════════════

def _total(transactions: Iterable[Transaction]) -> int:
    return sum(t.amount for t in transactions)


def ledger_summary(transactions: Iterable[Transaction]) -> LedgerSummary:
    """
    Profit & loss plus balance-sheet totals.

    Asset groups count receipts positive and everything else negative.
    Liabilities are the Capital and Current Liability groups.
    """
    transactions = list(transactions)
    assets = 0
    for t in transactions:
        if "Asset" in t.account_group:
            assets += t.amount if t.type == TransactionType.RECEIPT else -t.amount
    return LedgerSummary(
        income=_total(t for t in transactions if "Income" in t.account_group),
        expense=_total(t for t in transactions if "Expense" in t.account_group),
        assets=assets,
        liabilities=_total(t for t in transactions if t.account_group in LIABILITY_GROUPS),
    )


def cash_book(transactions: Iterable[Transaction]) -> CashBook:
    entries = tuple(t for t in transactions if "cash" in t.ledger.lower())
    return CashBook(
        entries=entries,
        ins=_total(t for t in entries if t.type == TransactionType.RECEIPT),
        outs=_total(t for t in entries if t.type == TransactionType.PAYMENT),
    )


def ledger_statement(transactions: Iterable[Transaction], ledger: str) -> List[Transaction]:
    return [t for t in transactions if t.ledger == ledger]


def day_book(transactions: Iterable[Transaction], day: DateLike) -> List[Transaction]:
    d = as_date(day)
    return [t for t in transactions if as_date(t.date) == d]


def collection_total(transactions: Iterable[Transaction], day: DateLike) -> int:
    """Sum of RECEIPT transactions dated `day`."""
    return _total(
        t for t in day_book(transactions, day) if t.type == TransactionType.RECEIPT
    )
