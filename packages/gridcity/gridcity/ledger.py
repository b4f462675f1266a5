"""FundsLedger - the city treasury."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from gridcity.types import InsufficientFunds

if TYPE_CHECKING:
    from gridcity_signal import ChangeNotifier

logger = logging.getLogger(__name__)


def to_money(amount: Any) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        return Decimal(str(amount))
    return Decimal(amount)


class FundsLedger:
    """Treasury balance with guarded debit and unconditional credit.

    Successful operations publish a change on the notifier; a refused debit
    leaves both the balance and the notifier untouched.
    """

    def __init__(
        self,
        funds: Decimal | int | str = Decimal("20000"),
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self._funds = to_money(funds)
        self._notifier = notifier

    @property
    def funds(self) -> Decimal:
        return self._funds

    def can_afford(self, amount: Decimal | int | str) -> bool:
        return self._funds >= to_money(amount)

    def debit(self, amount: Decimal | int | str) -> Decimal:
        """Deduct *amount*. Raises InsufficientFunds if the balance is short."""
        value = _checked(amount)
        if self._funds < value:
            raise InsufficientFunds(value, self._funds)
        self._funds -= value
        logger.debug("debit %s -> balance %s", value, self._funds)
        self._changed()
        return self._funds

    def credit(self, amount: Decimal | int | str) -> Decimal:
        value = _checked(amount)
        self._funds += value
        logger.debug("credit %s -> balance %s", value, self._funds)
        self._changed()
        return self._funds

    def reset(self, funds: Decimal | int | str) -> None:
        """Overwrite the balance (state load only)."""
        self._funds = to_money(funds)

    def _changed(self) -> None:
        if self._notifier is not None:
            self._notifier.publish()


def _checked(amount: Decimal | int | str) -> Decimal:
    value = to_money(amount)
    if not value.is_finite():
        raise ValueError(f"amount must be finite, got {value}")
    if value < 0:
        raise ValueError(f"amount must be >= 0, got {value}")
    return value
