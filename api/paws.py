from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies.runtime import get_ledger
from api.helpers import DOMAIN_ERRORS, to_http_exception
from api.schemas.paws import PawsBalanceResponse, PawsSpendRequest, PawsTransactionItem
from tools.paws import PawsLedger

router = APIRouter(prefix="/api/paws", tags=["paws"])


def _balance_response(ledger: PawsLedger, owner_id: str, limit: int) -> PawsBalanceResponse:
    balance = ledger.get_balance(owner_id)
    transactions = ledger.get_transactions(owner_id, limit)
    return PawsBalanceResponse(
        owner_id=owner_id,
        balance=balance,
        transactions=[PawsTransactionItem.model_validate(t) for t in transactions],
    )


@router.get("/{owner_id}", response_model=PawsBalanceResponse)
def get_paws(
    owner_id: str,
    limit: int = Query(50, ge=1, le=500),
    ledger: PawsLedger = Depends(get_ledger),
):
    """Баланс лапок и последние операции."""
    try:
        return _balance_response(ledger, owner_id, limit)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Ошибка при получении баланса: {e}")


@router.post("/{owner_id}/spend", response_model=PawsBalanceResponse)
def spend_paws(
    owner_id: str,
    payload: PawsSpendRequest,
    ledger: PawsLedger = Depends(get_ledger),
):
    """Списывает лапки. 402, если на балансе не хватает."""
    try:
        ledger.debit_currency(owner_id, payload.amount, payload.description)
        return _balance_response(ledger, owner_id, 50)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        raise HTTPException(status_code=503, detail=f"Ошибка при списании лапок: {e}")
