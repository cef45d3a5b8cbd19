"""User and CreditTransaction models.

Users are provisioned by the external auth provider; this service only
tracks the fields it needs: identity and the credit balance. Every
balance movement also leaves an immutable CreditTransaction row.
"""

from sqlalchemy import Column, Index, String, DateTime, Integer, Text, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base
from .project import utcnow


class User(Base):
    """Account holding a credit balance.

    ``credits`` is written only through the Credit Ledger's conditional
    UPDATE statements. It may not go below zero through a debit.
    """

    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True)
    display_name = Column(String(255), nullable=False, default="Default User")
    email = Column(String(255), unique=True, nullable=True)
    credits = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    projects = relationship(
        "Project",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    transactions = relationship(
        "CreditTransaction",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CreditTransaction(Base):
    """Immutable record of one balance movement.

    Fields:
        kind       — debit, refund, grant
        amount     — always positive; ``kind`` carries the sign
        reason     — what the movement paid for (e.g. "revision")
        project_id — plain reference, kept after the project is deleted
    """

    __tablename__ = "credit_transactions"
    __table_args__ = (
        Index("ix_credit_transactions_user_id", "user_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(50), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    kind = Column(String(20), nullable=False)
    amount = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    project_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="transactions")
