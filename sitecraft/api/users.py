"""Current-user endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.project import CreditsResponse, CreditTransactionResponse
from ..services import CreditLedger

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me/credits", response_model=CreditsResponse)
def get_credits(
    limit: int = Query(20, ge=1, le=100, description="Maximum number of transactions returned"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Remaining credit balance of the caller and its latest movements."""
    ledger = CreditLedger(db)
    return CreditsResponse(
        user_id=auth.user_id,
        credits=ledger.balance(auth.user_id),
        transactions=[
            CreditTransactionResponse.model_validate(t)
            for t in ledger.history(auth.user_id, limit=limit)
        ],
    )
