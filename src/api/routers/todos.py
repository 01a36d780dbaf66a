from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import get_current_user
from ..models import TodoEntity, UserEntity
from ..repositories import Repository, get_repository
from ..schemas import MessageResponse, TodoCreate, TodoOut, TodoUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"description": "Missing, invalid or revoked bearer token"}},
)


def _get_owned_todo(todo_id: str, user: UserEntity, repo: Repository, action: str) -> TodoEntity:
    """
    Load a todo and verify the requester owns it.

    Raises:
        HTTPException(404) if no such todo exists.
        HTTPException(403) if it exists but belongs to another user.
    """
    todo = repo.get(todo_id)
    if todo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    if todo["user"] != user["id"]:
        logger.warning("User %s denied %s on todo %s owned by %s", user["id"], action, todo_id, todo["user"])
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this todo",
        )
    return todo


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="List every todo of the current user, newest first.",
    responses={200: {"description": "List retrieved successfully"}},
)
def list_todos(
    user: UserEntity = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
) -> List[TodoOut]:
    """
    List the current user's todos ordered by creation time, descending.
    """
    return [TodoOut(**t) for t in repo.list_by_owner(user["id"])]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo owned by the current user and return it.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"description": "Validation error"},
    },
)
def create_todo(
    payload: TodoCreate,
    user: UserEntity = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
) -> TodoOut:
    created = repo.create(user["id"], payload)
    logger.info("User %s created todo %s", user["id"], created["id"])
    return TodoOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Partially update the text and/or completed flag of a Todo.",
    responses={
        200: {"description": "Todo updated"},
        400: {"description": "Validation error"},
        403: {"description": "Todo belongs to another user"},
        404: {"description": "Todo not found"},
    },
)
def patch_todo(
    todo_id: str,
    payload: TodoUpdate,
    user: UserEntity = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
) -> TodoOut:
    """
    Partial update of a Todo item. Fields absent from the body keep their value.
    """
    _get_owned_todo(todo_id, user, repo, "update")
    updated = repo.update(todo_id, payload)
    if not updated:
        # Removed between the ownership check and the write
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    return TodoOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageResponse,
    summary="Delete Todo",
    description="Delete a Todo of the current user.",
    responses={
        200: {"description": "Todo deleted"},
        403: {"description": "Todo belongs to another user"},
        404: {"description": "Todo not found"},
        500: {"description": "Storage failure"},
    },
)
def delete_todo(
    todo_id: str,
    user: UserEntity = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
) -> MessageResponse:
    _get_owned_todo(todo_id, user, repo, "delete")
    if not repo.delete(todo_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    logger.info("User %s deleted todo %s", user["id"], todo_id)
    return MessageResponse(message="Todo deleted")
