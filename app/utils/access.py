# app/utils/access.py
import enum
from dataclasses import dataclass
from typing import Optional

from app.errors import Forbidden, NotFound
from app.models.task import Task
from app.services.membership import MembershipLedger


class Action(str, enum.Enum):
    VIEW_TEAM = "view_team"
    VIEW_TASKS = "view_tasks"
    CREATE_TASK = "create_task"
    EDIT_TASK = "edit_task"
    DELETE_TASK = "delete_task"
    MANAGE_MEMBERS = "manage_members"
    UPDATE_TEAM = "update_team"
    DELETE_TEAM = "delete_team"


# Actions any member may perform
_MEMBER_ACTIONS = {Action.VIEW_TEAM, Action.VIEW_TASKS, Action.CREATE_TASK, Action.EDIT_TASK}
# Actions reserved for elevated roles
_ELEVATED_ACTIONS = {Action.MANAGE_MEMBERS, Action.UPDATE_TEAM}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None
    is_member: bool = False

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True, is_member=True)

    @classmethod
    def deny(cls, reason: str, is_member: bool) -> "Decision":
        return cls(allowed=False, reason=reason, is_member=is_member)


class AccessPolicy:
    """Decides whether an actor may perform an action on a team or task.

    Non-members are refused before any role check runs, and callers report
    that refusal as "not found" so a team's existence is not disclosed.
    Members lacking privilege get a reason, reported as forbidden.
    """

    def __init__(self, ledger: MembershipLedger):
        self.ledger = ledger

    def authorize(self, actor_id: int, action: Action, team_id: int, task: Optional[Task] = None) -> Decision:
        membership = self.ledger.membership(team_id, actor_id)
        if membership is None:
            return Decision.deny("You are not a member of this team", is_member=False)

        role = membership.role
        if action in _MEMBER_ACTIONS:
            return Decision.allow()

        if action in _ELEVATED_ACTIONS:
            if role.is_elevated:
                return Decision.allow()
            return Decision.deny("You must be a team owner or admin to perform this action", is_member=True)

        if action is Action.DELETE_TEAM:
            if role.is_top:
                return Decision.allow()
            return Decision.deny("Only the team owner can delete the team", is_member=True)

        if action is Action.DELETE_TASK:
            if task is None:
                raise ValueError("DELETE_TASK requires the task being deleted")
            if task.created_by == actor_id or role.is_elevated:
                return Decision.allow()
            return Decision.deny(
                "Only the task creator or a team owner/admin can delete this task",
                is_member=True,
            )

        raise ValueError(f"Unknown action: {action}")


def enforce(decision: Decision, not_found_message: str) -> None:
    """Raise the error a denied decision maps to"""
    if decision.allowed:
        return
    if not decision.is_member:
        raise NotFound(not_found_message)
    raise Forbidden(decision.reason)
