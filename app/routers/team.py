# app/routers/team.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models.user import User
from app.schemas.team import TeamCreate, TeamUpdate, TeamOut, TeamSummary, TeamDetail, TeamMemberOut, TeamMemberAdd
from app.services.team_service import TeamRegistry
from app.utils.auth import get_current_user

router = APIRouter()


@router.get("/", response_model=List[TeamSummary])
def get_my_teams(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get every team the current user belongs to, with their role in it"""
    return TeamRegistry(db).list_teams_for(current_user.id)


@router.post("/", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team(
    team_data: TeamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a new team; the creator becomes its owner"""
    return TeamRegistry(db).create_team(current_user.id, team_data.name, team_data.description)


@router.get("/{team_id}", response_model=TeamDetail)
def get_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a team with its members"""
    registry = TeamRegistry(db)
    team = registry.get_team(current_user.id, team_id)
    members = registry.list_members(current_user.id, team_id)
    return TeamDetail(
        **TeamOut.model_validate(team).model_dump(),
        members=[TeamMemberOut.model_validate(member) for member in members],
    )


@router.put("/{team_id}", response_model=TeamOut)
def update_team(
    team_id: int,
    team_update: TeamUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a team - only owners and admins"""
    fields = team_update.model_dump(exclude_unset=True)
    return TeamRegistry(db).update_team(current_user.id, team_id, fields)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a team and everything in it - only the owner"""
    TeamRegistry(db).delete_team(current_user.id, team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{team_id}/members", response_model=List[TeamMemberOut])
def get_team_members(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get all members of a team, owner first"""
    return TeamRegistry(db).list_members(current_user.id, team_id)


@router.post("/{team_id}/members", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
def add_team_member(
    team_id: int,
    member_data: TeamMemberAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Add a user to a team by username or email"""
    return TeamRegistry(db).add_member(current_user.id, team_id, member_data.identifier, member_data.role)


@router.delete("/{team_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_team_member(
    team_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Remove a member from a team; the owner cannot be removed"""
    TeamRegistry(db).remove_member(current_user.id, team_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
