from typing import Any

from fastapi import APIRouter, Body, Depends

from paysheet.api.dependencies import get_components, get_current_user
from paysheet.api.responses import ok
from paysheet.models.user import TokenUser
from paysheet.orchestrator import AppComponents


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(
    payload: dict[str, Any] = Body(default={}),
    components: AppComponents = Depends(get_components),
):
    token, user = components.auth.login(payload)
    return ok(
        {"token": token, "user": user.model_dump(mode="json")},
        message="Login successful",
    )


@router.post("/register", status_code=201)
def register(
    payload: dict[str, Any] = Body(default={}),
    components: AppComponents = Depends(get_components),
):
    token, user = components.auth.register(payload)
    return ok(
        {"token": token, "user": user.model_dump(mode="json")},
        message="User registered successfully",
    )


@router.get("/me")
def me(user: TokenUser = Depends(get_current_user)):
    return ok({"user": user.model_dump(mode="json")})
