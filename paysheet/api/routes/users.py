from typing import Any

from fastapi import APIRouter, Body, Depends

from paysheet.api.dependencies import get_components, require_admin
from paysheet.api.responses import ok
from paysheet.models.user import TokenUser
from paysheet.orchestrator import AppComponents


router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(
    components: AppComponents = Depends(get_components),
    admin: TokenUser = Depends(require_admin),
):
    return ok([user.model_dump(mode="json") for user in components.users.list()])


@router.post("", status_code=201)
def create_user(
    payload: dict[str, Any] = Body(default={}),
    components: AppComponents = Depends(get_components),
    admin: TokenUser = Depends(require_admin),
):
    user = components.users.create(payload, actor=admin)
    return ok(user.model_dump(mode="json"), message="User created successfully")


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: dict[str, Any] = Body(default={}),
    components: AppComponents = Depends(get_components),
    admin: TokenUser = Depends(require_admin),
):
    user = components.users.update(admin, user_id, payload)
    return ok(user.model_dump(mode="json"), message="User updated successfully")


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    components: AppComponents = Depends(get_components),
    admin: TokenUser = Depends(require_admin),
):
    components.users.delete(admin, user_id)
    return ok(message="User deleted successfully")
