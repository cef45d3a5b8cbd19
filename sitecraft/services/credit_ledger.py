"""Credit ledger — the only writer of a user's credit balance.

Debits are a single conditional UPDATE (``credits >= amount``), so two
concurrent debits can never both pass on a balance that only covers one.
Each movement also writes an immutable CreditTransaction row in the same
transaction, which makes every debit traceable to its refund, if any.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..exceptions import InsufficientCreditsError
from ..models.user import User, CreditTransaction

logger = logging.getLogger(__name__)

KIND_DEBIT = "debit"
KIND_REFUND = "refund"
KIND_GRANT = "grant"


class CreditLedger:
    """Debit and credit a user's usage counter."""

    def __init__(self, db: Session):
        self.db = db

    def debit(
        self,
        user_id: str,
        amount: int,
        reason: str,
        project_id: Optional[str] = None,
    ) -> int:
        """Take *amount* credits from the user, or fail without touching anything.

        Returns:
            The balance after the debit.

        Raises:
            InsufficientCreditsError: balance < amount (or unknown user).
        """
        if amount <= 0:
            raise ValueError("debit amount must be positive")

        updated = (
            self.db.query(User)
            .filter(User.user_id == user_id, User.credits >= amount)
            .update({User.credits: User.credits - amount}, synchronize_session=False)
        )
        if updated == 0:
            logger.info(
                "Debit refused: insufficient credits",
                extra={"user_id": user_id, "amount": amount},
            )
            raise InsufficientCreditsError(user_id, amount)

        self._record(user_id, KIND_DEBIT, amount, reason, project_id)
        self.db.commit()

        balance = self.balance(user_id)
        logger.info(
            "Debited %d credits", amount,
            extra={"user_id": user_id, "reason": reason, "balance": balance},
        )
        return balance

    def credit(
        self,
        user_id: str,
        amount: int,
        reason: str,
        project_id: Optional[str] = None,
        kind: str = KIND_REFUND,
    ) -> int:
        """Give *amount* credits back. Unconditional; returns the new balance."""
        if amount <= 0:
            raise ValueError("credit amount must be positive")

        self.db.query(User).filter(User.user_id == user_id).update(
            {User.credits: User.credits + amount}, synchronize_session=False
        )
        self._record(user_id, kind, amount, reason, project_id)
        self.db.commit()

        balance = self.balance(user_id)
        logger.info(
            "Credited %d credits (%s)", amount, kind,
            extra={"user_id": user_id, "reason": reason, "balance": balance},
        )
        return balance

    def balance(self, user_id: str) -> int:
        """Current balance. Read-only; never use it to decide a write."""
        value = (
            self.db.query(User.credits)
            .filter(User.user_id == user_id)
            .scalar()
        )
        return value or 0

    def history(self, user_id: str, limit: int = 50) -> list[CreditTransaction]:
        """Most recent balance movements first."""
        return (
            self.db.query(CreditTransaction)
            .filter(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.id.desc())
            .limit(limit)
            .all()
        )

    def _record(
        self,
        user_id: str,
        kind: str,
        amount: int,
        reason: str,
        project_id: Optional[str],
    ) -> None:
        self.db.add(CreditTransaction(
            user_id=user_id,
            kind=kind,
            amount=amount,
            reason=reason,
            project_id=project_id,
        ))
        self.db.flush()
