"""Balance projection: signed deltas that journal lines apply to accounts.

Every line moves its account's running balance by ``+amount`` when it is a
debit and ``-amount`` when it is a credit, whatever the account type. Reports
flip signs for presentation; the stored balances never do.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Protocol

from ledgerkit.domain.entities import LineType


class _LineLike(Protocol):
    account_id: int
    type: LineType
    amount: Decimal


def line_delta(line_type: LineType, amount: Decimal) -> Decimal:
    """Return the balance delta a line of this type and amount applies."""
    if LineType(line_type) == LineType.DEBIT:
        return amount
    return -amount


def balance_deltas(lines: Iterable[_LineLike], revert: bool = False) -> dict[int, Decimal]:
    """Net balance delta per account for a set of lines.

    Args:
        lines: Journal lines (persisted or input) to project
        revert: If True, return the inverse deltas that undo the lines

    Returns:
        Mapping of account ID to net delta, omitting accounts that net to zero
    """
    deltas: dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
    for line in lines:
        delta = line_delta(line.type, line.amount)
        deltas[line.account_id] += -delta if revert else delta
    return {account_id: delta for account_id, delta in deltas.items() if delta != 0}


def sum_by_type(lines: Iterable[_LineLike]) -> tuple[Decimal, Decimal]:
    """Return (total debits, total credits) for a set of lines."""
    debits = Decimal("0")
    credits = Decimal("0")
    for line in lines:
        if LineType(line.type) == LineType.DEBIT:
            debits += line.amount
        else:
            credits += line.amount
    return debits, credits
