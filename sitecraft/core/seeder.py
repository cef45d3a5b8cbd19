"""Provision the development user on startup.

With authentication disabled every request acts as ``DEV_USER_ID``. That
user has to exist, with some credits, before the first revision can pass
the credit check. Idempotent: an existing user is left untouched.
"""

import logging

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def seed_dev_user(db: Session, user_id: str, initial_credits: int) -> bool:
    """Create *user_id* with an initial credit grant if missing.

    Args:
        db: An open SQLAlchemy session.
        user_id: Identity used for unauthenticated requests.
        initial_credits: Balance granted through the credit ledger.

    Returns:
        True if the user was created, False if it already existed.
    """
    from ..models.user import User
    from ..services.credit_ledger import CreditLedger, KIND_GRANT

    if db.query(User).filter(User.user_id == user_id).first() is not None:
        logger.debug("Development user %s already exists, skipping seed", user_id)
        return False

    db.add(User(user_id=user_id, display_name="Developer", credits=0))
    db.commit()

    if initial_credits > 0:
        CreditLedger(db).credit(user_id, initial_credits, "initial grant", kind=KIND_GRANT)

    logger.info("Seeded development user %s with %d credits", user_id, initial_credits)
    return True
