# app/services/membership.py
"""
Membership ledger: the single source of truth for who belongs to which team
and with what role
"""

import logging
from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import unit_of_work
from app.errors import AlreadyMember, CannotRemoveTopRole, InvalidRole, NotFound
from app.models.team import Team, TeamMember, TeamRole
from app.models.user import User

logger = logging.getLogger(__name__)


def parse_role(role: Union[TeamRole, str]) -> TeamRole:
    """Coerce a role name to ``TeamRole`` or raise ``InvalidRole``"""
    if isinstance(role, TeamRole):
        return role
    try:
        return TeamRole(str(role).strip().lower())
    except ValueError:
        allowed = ", ".join(r.value for r in TeamRole)
        raise InvalidRole(f"Role must be one of: {allowed}")


class MembershipLedger:
    """Maps (team, user) to a role"""

    def __init__(self, db: Session):
        self.db = db

    def membership(self, team_id: int, user_id: int) -> Optional[TeamMember]:
        return self.db.query(TeamMember).filter(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_id,
        ).first()

    def is_member(self, team_id: int, user_id: int) -> bool:
        if user_id is None:
            return False
        return self.membership(team_id, user_id) is not None

    def role_of(self, team_id: int, user_id: int) -> TeamRole:
        member = self.membership(team_id, user_id)
        if member is None:
            raise NotFound("Member not found in this team")
        return member.role

    def members_of(self, team_id: int) -> List[TeamMember]:
        """Snapshot of a team's memberships, highest role first, then by join time"""
        members = self.db.query(TeamMember).filter(TeamMember.team_id == team_id).all()
        return sorted(members, key=lambda m: (-m.role.rank, m.joined_at, m.id))

    def add_member(self, team_id: int, user_id: int, role: Union[TeamRole, str] = TeamRole.MEMBER) -> TeamMember:
        role = parse_role(role)

        if self.db.get(Team, team_id) is None:
            raise NotFound("Team not found")
        if self.db.get(User, user_id) is None:
            raise NotFound("User not found")

        if self.is_member(team_id, user_id):
            raise AlreadyMember()

        if role.is_top and self._has_top_member(team_id):
            raise InvalidRole(f"A team can only have one {role.value}")

        member = TeamMember(team_id=team_id, user_id=user_id, role=role)
        try:
            with unit_of_work(self.db):
                self.db.add(member)
                self.db.flush()
        except IntegrityError:
            # Racing insert of the same pair; existence was checked above
            raise AlreadyMember()

        logger.info("Added user %s to team %s as %s", user_id, team_id, role.value)
        return member

    def remove_member(self, team_id: int, user_id: int) -> None:
        member = self.membership(team_id, user_id)
        if member is None:
            raise NotFound("Member not found in this team")
        if member.role.is_top:
            raise CannotRemoveTopRole()

        with unit_of_work(self.db):
            self.db.delete(member)

        logger.info("Removed user %s from team %s", user_id, team_id)

    def _has_top_member(self, team_id: int) -> bool:
        return self.db.query(TeamMember).filter(
            TeamMember.team_id == team_id,
            TeamMember.role == TeamRole.top(),
        ).first() is not None
