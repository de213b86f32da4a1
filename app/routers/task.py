# app/routers/task.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.task import TaskStatus, TaskPriority
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut
from app.services.task_service import TaskRegistry
from app.utils.auth import get_current_user

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/", response_model=List[TaskOut])
def get_all_tasks(
    team_id: Optional[int] = None,
    assigned_to: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get tasks from the current user's teams

    Filters are combined with AND; ``search`` matches title or description,
    case-insensitively. Newest tasks come first.
    """
    return TaskRegistry(db).list_tasks(
        current_user.id,
        team_id=team_id,
        assigned_to=assigned_to,
        status=status,
        priority=priority,
        search=search,
    )


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a task in one of the current user's teams"""
    fields = task_data.model_dump(exclude={"team_id"})
    return TaskRegistry(db).create_task(current_user.id, task_data.team_id, fields)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a specific task by ID"""
    return TaskRegistry(db).get_task(current_user.id, task_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the fields present in the body; others keep their value"""
    fields = task_update.model_dump(exclude_unset=True)
    return TaskRegistry(db).update_task(current_user.id, task_id, fields)


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    status_update: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return TaskRegistry(db).update_status(current_user.id, task_id, status_update.status)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a task - its creator or a team owner/admin"""
    TaskRegistry(db).delete_task(current_user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
