"""User management API router. Everything except changing one's own password is admin only."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesdesk.auth.dependencies import require_permission
from salesdesk.auth.rbac import Action, Resource
from salesdesk.core.database import get_db
from salesdesk.core.errors import ConflictError
from salesdesk.modules.users import service
from salesdesk.modules.users.schemas import (
    ChangePasswordRequest,
    ResetPasswordRequest,
    UpdateRoleRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
)
from salesdesk.schemas.auth import CurrentUser

router = APIRouter(prefix="/users", tags=["users"])

_admin = require_permission(Action.MANAGE, Resource.USER)


@router.get("", response_model=UserListResponse)
async def list_users(
    current_user: CurrentUser = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    users = await service.list_users(db)
    return UserListResponse(items=[UserResponse.model_validate(u) for u in users], total=len(users))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    current_user: CurrentUser = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        user = await service.create_user(db, body)
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.post("/me/password")
async def change_my_password(
    body: ChangePasswordRequest,
    current_user: CurrentUser = Depends(require_permission(Action.EDIT, Resource.ACCOUNT)),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.change_own_password(db, current_user.user_id, body.old_password, body.new_password)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    await db.commit()
    return {"success": True}


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: uuid.UUID,
    body: UpdateRoleRequest,
    current_user: CurrentUser = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        user = await service.update_role(db, user_id, body.role)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.delete_user(db, user_id, acting_user_id=current_user.user_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    await db.commit()


@router.post("/{user_id}/reset-password")
async def reset_user_password(
    user_id: uuid.UUID,
    body: ResetPasswordRequest,
    current_user: CurrentUser = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.reset_password(db, user_id, body.new_password)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    await db.commit()
    return {"success": True}
