"""LimCoin ledger for a single user."""

from __future__ import annotations

from dataclasses import dataclass

from accounts.domain.exceptions import InsufficientFundsError, InvalidAmountError


@dataclass
class Ledger:
    """Non-negative integer balance of LimCoins.

    Business rules:
    - The balance is never negative
    - Credits and debits only accept non-negative amounts
    - A debit that exceeds the balance fails and leaves the balance unchanged

    The ledger performs no locking of its own. Callers mutate it only while
    holding the owning user's aggregate lock.
    """

    balance: int = 0

    def __post_init__(self) -> None:
        if self.balance < 0:
            raise InvalidAmountError(self.balance)

    def credit(self, amount: int) -> None:
        """Increase the balance by amount.

        Args:
            amount: LimCoins to add

        Raises:
            InvalidAmountError: If amount is negative
        """
        self._require_non_negative(amount)
        self.balance += amount

    def debit(self, amount: int) -> None:
        """Decrease the balance by amount if funds allow.

        Args:
            amount: LimCoins to remove

        Raises:
            InvalidAmountError: If amount is negative
            InsufficientFundsError: If balance < amount (balance untouched)
        """
        self._require_non_negative(amount)
        if not self.can_afford(amount):
            raise InsufficientFundsError(balance=self.balance, requested=amount)
        self.balance -= amount

    def can_afford(self, amount: int) -> bool:
        """Check whether amount could be debited."""
        return self.balance >= amount

    @staticmethod
    def _require_non_negative(amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError(amount)
