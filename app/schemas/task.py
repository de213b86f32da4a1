# app/schemas/task.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional
from app.models.task import TaskStatus, TaskPriority
from app.schemas.user import UserBasic

class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    team_id: int
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None

class TaskUpdate(BaseModel):
    """Partial update: only the fields present in the request body change"""
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None

class TaskStatusUpdate(BaseModel):
    status: TaskStatus

# For returning task data
class TeamBasic(BaseModel):
    id: int
    name: str

    model_config = {
        "from_attributes": True
    }

class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    team_id: int
    created_by: int
    assigned_to: Optional[int] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    # Related objects
    team: TeamBasic
    creator: UserBasic
    assignee: Optional[UserBasic] = None

    model_config = {
        "from_attributes": True
    }
