from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from paysheet.api.dependencies import get_components, get_current_user
from paysheet.api.responses import ok
from paysheet.models.user import TokenUser
from paysheet.orchestrator import AppComponents


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("")
def list_transactions(
    tx_type: Optional[str] = Query(None, alias="type"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    category: Optional[str] = Query(None),
    components: AppComponents = Depends(get_components),
    user: TokenUser = Depends(get_current_user),
):
    transactions = components.transactions.list(
        tx_type=tx_type,
        start_date=start_date,
        end_date=end_date,
        category=category,
    )
    return ok({
        "transactions": [t.to_api() for t in transactions],
        "count": len(transactions),
    })


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: str,
    components: AppComponents = Depends(get_components),
    user: TokenUser = Depends(get_current_user),
):
    transaction = components.transactions.get(transaction_id)
    return ok({"transaction": transaction.to_api()})


@router.post("", status_code=201)
def create_transaction(
    payload: dict[str, Any] = Body(default={}),
    components: AppComponents = Depends(get_components),
    user: TokenUser = Depends(get_current_user),
):
    transaction = components.transactions.create(payload, actor=user)
    return ok(
        {"transaction": transaction.to_api()},
        message="Transaction created successfully",
    )


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: str,
    payload: dict[str, Any] = Body(default={}),
    components: AppComponents = Depends(get_components),
    user: TokenUser = Depends(get_current_user),
):
    transaction = components.transactions.update(transaction_id, payload, actor=user)
    return ok(
        {"transaction": transaction.to_api()},
        message="Transaction updated successfully",
    )


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: str,
    components: AppComponents = Depends(get_components),
    user: TokenUser = Depends(get_current_user),
):
    components.transactions.delete(transaction_id, actor=user)
    return ok(message="Transaction deleted successfully")
