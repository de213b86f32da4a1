from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from app.models.team import TeamRole

class TeamCreate(BaseModel):
    name: str
    description: Optional[str] = None

class TeamUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

class TeamOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_by: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

class TeamSummary(TeamOut):
    """A team as seen by one of its members"""
    role: TeamRole
    member_count: int
    creator_name: Optional[str] = None

class TeamMemberOut(BaseModel):
    user_id: int
    username: str
    email: str
    role: TeamRole
    joined_at: datetime

    model_config = {
        "from_attributes": True
    }

class TeamDetail(TeamOut):
    members: List[TeamMemberOut]

class TeamMemberAdd(BaseModel):
    identifier: str  # username or email
    role: TeamRole = TeamRole.MEMBER
