# app/services/task_service.py
"""
Task registry: team-scoped task CRUD

Every task belongs to one team. Members of that team may create, read and
edit its tasks; deleting is limited to the task's creator and the team's
owner/admins. An assignee, when set, is always a member of the task's team.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from app.config.security import SecurityConfig
from app.database import unit_of_work
from app.errors import InvalidAssignee, NoFieldsProvided, NotFound, ValidationError
from app.models.task import Task, TaskPriority, TaskStatus
from app.models.team import TeamMember
from app.services.membership import MembershipLedger
from app.utils.access import AccessPolicy, Action, enforce

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
TEAM_NOT_FOUND = "Team not found"
_UPDATABLE_FIELDS = ("title", "description", "assigned_to", "status", "priority", "due_date")


def _parse_enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field}. Must be one of: {allowed}", field=field)


def parse_status(value: Union[TaskStatus, str]) -> TaskStatus:
    return _parse_enum(TaskStatus, value, "status")


def parse_priority(value: Union[TaskPriority, str]) -> TaskPriority:
    return _parse_enum(TaskPriority, value, "priority")


def clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    low = SecurityConfig.VALIDATION['task_title_min_length']
    high = SecurityConfig.VALIDATION['task_title_max_length']
    if not (low <= len(title) <= high):
        raise ValidationError(f"Title must be between {low} and {high} characters", field="title")
    return title


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def clean_due_date(value: Union[date, str, None]) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError("Due date must be a valid date", field="due_date")


def _lowest(enum_cls):
    # Enumerations are declared from lowest to highest severity
    return next(iter(enum_cls))


class TaskRegistry:
    """Creates, reads, updates and deletes tasks on behalf of an actor"""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = MembershipLedger(db)
        self.policy = AccessPolicy(self.ledger)

    def create_task(self, actor_id: int, team_id: int, fields: Dict[str, Any]) -> Task:
        enforce(self.policy.authorize(actor_id, Action.CREATE_TASK, team_id), TEAM_NOT_FOUND)

        assigned_to = fields.get("assigned_to")
        if assigned_to is not None and not self.ledger.is_member(team_id, assigned_to):
            raise InvalidAssignee()

        status = fields.get("status")
        priority = fields.get("priority")
        task = Task(
            title=clean_title(fields.get("title")),
            description=_clean_text(fields.get("description")),
            team_id=team_id,
            assigned_to=assigned_to,
            created_by=actor_id,
            status=parse_status(status) if status is not None else _lowest(TaskStatus),
            priority=parse_priority(priority) if priority is not None else _lowest(TaskPriority),
            due_date=clean_due_date(fields.get("due_date")),
        )

        with unit_of_work(self.db):
            self.db.add(task)

        logger.info("User %s created task %s in team %s", actor_id, task.id, team_id)
        return self.get_task(actor_id, task.id)

    def get_task(self, actor_id: int, task_id: int) -> Task:
        task = (
            self.db.query(Task)
            .options(joinedload(Task.creator), joinedload(Task.assignee), joinedload(Task.team))
            .filter(Task.id == task_id)
            .first()
        )
        # Absent and inaccessible look the same to the caller
        if task is None or not self.ledger.is_member(task.team_id, actor_id):
            raise NotFound(TASK_NOT_FOUND)
        return task

    def update_task(self, actor_id: int, task_id: int, fields: Dict[str, Any]) -> Task:
        task = self._load(task_id)
        if task is None:
            raise NotFound(TASK_NOT_FOUND)
        enforce(self.policy.authorize(actor_id, Action.EDIT_TASK, task.team_id, task), TASK_NOT_FOUND)

        fields = dict(fields or {})
        if "team_id" in fields and fields["team_id"] != task.team_id:
            raise ValidationError("Tasks cannot be moved to another team", field="team_id")
        changes = {key: value for key, value in fields.items() if key in _UPDATABLE_FIELDS}
        if not changes:
            raise NoFieldsProvided()

        # Validate every field first so a bad one leaves the task untouched
        if "title" in changes:
            changes["title"] = clean_title(changes["title"])
        if "description" in changes:
            changes["description"] = _clean_text(changes["description"])
        if "status" in changes:
            changes["status"] = parse_status(changes["status"])
        if "priority" in changes:
            changes["priority"] = parse_priority(changes["priority"])
        if "due_date" in changes:
            changes["due_date"] = clean_due_date(changes["due_date"])
        if "assigned_to" in changes:
            new_assignee = changes["assigned_to"]
            if (
                new_assignee is not None
                and new_assignee != task.assigned_to
                and not self.ledger.is_member(task.team_id, new_assignee)
            ):
                raise InvalidAssignee()

        with unit_of_work(self.db):
            for field, value in changes.items():
                setattr(task, field, value)

        logger.info("User %s updated task %s: %s", actor_id, task_id, sorted(changes))
        return self.get_task(actor_id, task_id)

    def update_status(self, actor_id: int, task_id: int, status: Union[TaskStatus, str]) -> Task:
        return self.update_task(actor_id, task_id, {"status": status})

    def delete_task(self, actor_id: int, task_id: int) -> None:
        task = self._load(task_id)
        if task is None:
            raise NotFound(TASK_NOT_FOUND)

        decision = self.policy.authorize(actor_id, Action.DELETE_TASK, task.team_id, task)
        if not decision.allowed:
            logger.warning("Denied delete of task %s for user %s: %s", task_id, actor_id, decision.reason)
        enforce(decision, TASK_NOT_FOUND)

        with unit_of_work(self.db):
            self.db.delete(task)

        logger.info("User %s deleted task %s", actor_id, task_id)

    def list_tasks(
        self,
        actor_id: int,
        team_id: Optional[int] = None,
        assigned_to: Optional[int] = None,
        status: Union[TaskStatus, str, None] = None,
        priority: Union[TaskPriority, str, None] = None,
        search: Optional[str] = None,
    ) -> List[Task]:
        """Tasks from every team the actor belongs to, newest first, filters ANDed"""
        actor_teams = select(TeamMember.team_id).where(TeamMember.user_id == actor_id)

        query = (
            self.db.query(Task)
            .options(joinedload(Task.creator), joinedload(Task.assignee), joinedload(Task.team))
            .filter(Task.team_id.in_(actor_teams))
        )

        if team_id is not None:
            query = query.filter(Task.team_id == team_id)
        if assigned_to is not None:
            query = query.filter(Task.assigned_to == assigned_to)
        if status is not None:
            query = query.filter(Task.status == parse_status(status))
        if priority is not None:
            query = query.filter(Task.priority == parse_priority(priority))
        if search:
            needle = search.strip().lower()
            if needle:
                query = query.filter(or_(
                    func.lower(Task.title).contains(needle, autoescape=True),
                    func.lower(func.coalesce(Task.description, "")).contains(needle, autoescape=True),
                ))

        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    def _load(self, task_id: int) -> Optional[Task]:
        return self.db.query(Task).filter(Task.id == task_id).first()
