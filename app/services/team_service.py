# app/services/team_service.py
"""
Team registry: team metadata and membership management, gated by the access policy
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config.security import SecurityConfig
from app.database import unit_of_work
from app.errors import NoFieldsProvided, NotFound, ValidationError
from app.models.task import Task
from app.models.team import Team, TeamMember, TeamRole
from app.models.user import User
from app.services.identity import IdentityStore
from app.services.membership import MembershipLedger
from app.utils.access import AccessPolicy, Action, enforce

logger = logging.getLogger(__name__)

TEAM_NOT_FOUND = "Team not found"
_UPDATABLE_FIELDS = ("name", "description")


def clean_team_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    low = SecurityConfig.VALIDATION['team_name_min_length']
    high = SecurityConfig.VALIDATION['team_name_max_length']
    if not (low <= len(name) <= high):
        raise ValidationError(f"Team name must be between {low} and {high} characters", field="name")
    return name


def clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    description = description.strip()
    return description or None


class TeamRegistry:
    """Creates, updates and deletes teams and manages their members"""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = MembershipLedger(db)
        self.policy = AccessPolicy(self.ledger)
        self.identities = IdentityStore(db)

    def create_team(self, creator_id: int, name: str, description: Optional[str] = None) -> Team:
        name = clean_team_name(name)
        description = clean_description(description)

        # The team and its owner membership land together or not at all
        with unit_of_work(self.db):
            team = Team(name=name, description=description, created_by=creator_id)
            self.db.add(team)
            self.db.flush()
            self.ledger.add_member(team.id, creator_id, TeamRole.top())

        self.db.refresh(team)
        logger.info("User %s created team %s (%r)", creator_id, team.id, team.name)
        return team

    def get_team(self, actor_id: int, team_id: int) -> Team:
        enforce(self.policy.authorize(actor_id, Action.VIEW_TEAM, team_id), TEAM_NOT_FOUND)
        team = self._load(team_id)
        if team is None:
            raise NotFound(TEAM_NOT_FOUND)
        return team

    def update_team(self, actor_id: int, team_id: int, fields: Dict[str, Any]) -> Team:
        self._authorize(actor_id, Action.UPDATE_TEAM, team_id)
        team = self._load(team_id)
        if team is None:
            raise NotFound(TEAM_NOT_FOUND)

        changes = {key: value for key, value in (fields or {}).items() if key in _UPDATABLE_FIELDS}
        if not changes:
            raise NoFieldsProvided()

        # Validate everything before touching the row
        if "name" in changes:
            changes["name"] = clean_team_name(changes["name"])
        if "description" in changes:
            changes["description"] = clean_description(changes["description"])

        with unit_of_work(self.db):
            for field, value in changes.items():
                setattr(team, field, value)

        self.db.refresh(team)
        logger.info("User %s updated team %s: %s", actor_id, team_id, sorted(changes))
        return team

    def delete_team(self, actor_id: int, team_id: int) -> None:
        self._authorize(actor_id, Action.DELETE_TEAM, team_id)
        team = self._load(team_id)
        if team is None:
            raise NotFound(TEAM_NOT_FOUND)

        # Memberships and tasks go with it through ON DELETE CASCADE
        with unit_of_work(self.db):
            self.db.delete(team)

        logger.info("User %s deleted team %s", actor_id, team_id)

    def list_teams_for(self, user_id: int) -> List[Dict[str, Any]]:
        """Every team the user belongs to, with the user's role and a member count"""
        member_counts = (
            self.db.query(TeamMember.team_id, func.count(TeamMember.id).label("member_count"))
            .group_by(TeamMember.team_id)
            .subquery()
        )
        rows = (
            self.db.query(Team, TeamMember.role, member_counts.c.member_count, User.username)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .join(member_counts, member_counts.c.team_id == Team.id)
            .outerjoin(User, User.id == Team.created_by)
            .filter(TeamMember.user_id == user_id)
            .order_by(Team.created_at.desc(), Team.id.desc())
            .all()
        )
        return [
            {
                "id": team.id,
                "name": team.name,
                "description": team.description,
                "created_by": team.created_by,
                "created_at": team.created_at,
                "updated_at": team.updated_at,
                "role": role,
                "member_count": member_count,
                "creator_name": creator_name,
            }
            for team, role, member_count, creator_name in rows
        ]

    def list_members(self, actor_id: int, team_id: int) -> List[TeamMember]:
        enforce(self.policy.authorize(actor_id, Action.VIEW_TEAM, team_id), TEAM_NOT_FOUND)
        return self.ledger.members_of(team_id)

    def add_member(
        self,
        actor_id: int,
        team_id: int,
        identifier: str,
        role: Union[TeamRole, str] = TeamRole.MEMBER,
    ) -> TeamMember:
        """Add the user named by ``identifier`` (username or email) to the team"""
        self._authorize(actor_id, Action.MANAGE_MEMBERS, team_id)

        user = self.identities.find(identifier)
        if user is None:
            raise NotFound("User not found")

        member = self.ledger.add_member(team_id, user.id, role)

        self.db.refresh(member)
        return member

    def remove_member(self, actor_id: int, team_id: int, user_id: int) -> None:
        self._authorize(actor_id, Action.MANAGE_MEMBERS, team_id)

        with unit_of_work(self.db):
            self.ledger.remove_member(team_id, user_id)
            # An assignee must stay a member, so their tasks here become unassigned
            unassigned = (
                self.db.query(Task)
                .filter(Task.team_id == team_id, Task.assigned_to == user_id)
                .update({Task.assigned_to: None}, synchronize_session=False)
            )

        if unassigned:
            logger.info("Unassigned %s task(s) in team %s from removed user %s", unassigned, team_id, user_id)

    def _authorize(self, actor_id: int, action: Action, team_id: int) -> None:
        decision = self.policy.authorize(actor_id, action, team_id)
        if not decision.allowed:
            logger.warning(
                "Denied %s on team %s for user %s: %s",
                action.value, team_id, actor_id, decision.reason,
            )
        enforce(decision, TEAM_NOT_FOUND)

    def _load(self, team_id: int) -> Optional[Team]:
        return self.db.query(Team).filter(Team.id == team_id).first()
