"""Monthly budget settlement."""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from gridcity.ledger import FundsLedger
from gridcity.types import InsufficientFunds, System, TickContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settlement:
    """Outcome of one month-end reconciliation.

    ``applied`` is False only when a deficit exceeded the treasury, in which
    case the funds were left as they were.
    """

    date: datetime.date
    net_income: Decimal
    applied: bool


def settle_month(
    ledger: FundsLedger, net_income: Decimal, date: datetime.date
) -> Settlement:
    """Apply one month of net income to the ledger.

    A surplus is credited; a deficit is debited. A deficit the treasury
    cannot cover is skipped (the city never goes into debt).
    """
    if net_income >= 0:
        ledger.credit(net_income)
        logger.info("settlement %s: +%s, funds %s", date, net_income, ledger.funds)
        return Settlement(date, net_income, applied=True)
    try:
        ledger.debit(abs(net_income))
    except InsufficientFunds as exc:
        logger.warning(
            "settlement %s skipped: deficit %s exceeds funds %s",
            date, exc.requested, exc.available,
        )
        return Settlement(date, net_income, applied=False)
    logger.info("settlement %s: %s, funds %s", date, net_income, ledger.funds)
    return Settlement(date, net_income, applied=True)


def make_settlement_system(
    ledger: FundsLedger,
    net_income: Callable[[], Decimal],
    on_settled: Callable[[Settlement], None] | None = None,
) -> System:
    """Return a system that settles the budget whenever a new month starts."""

    def settlement_system(ctx: TickContext) -> None:
        if not ctx.is_month_start:
            return
        result = settle_month(ledger, net_income(), ctx.date)
        if on_settled is not None:
            on_settled(result)

    return settlement_system
