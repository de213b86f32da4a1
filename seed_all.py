"""
Master Database Seeding Script
Creates database tables and populates them with demo users, teams and tasks.
Everything goes through the registries, so the seeded data obeys the same
membership and assignment rules as data created over the API.
"""

from datetime import date, timedelta

from app.database import SessionLocal
from app.errors import TaskManagerError
from app.services.identity import IdentityStore
from app.services.task_service import TaskRegistry
from app.services.team_service import TeamRegistry
from create_tables import create_tables

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"username": "alice", "email": "alice@example.com"},
    {"username": "bob", "email": "bob@example.com"},
    {"username": "carol", "email": "carol@example.com"},
    {"username": "dave", "email": "dave@example.com"},
]

# Owner is the team creator; members are (username, role)
DEMO_TEAMS = [
    {
        "name": "Engineering",
        "description": "Backend and frontend development",
        "owner": "alice",
        "members": [("bob", "admin"), ("carol", "member")],
    },
    {
        "name": "Marketing",
        "description": "Campaigns and launch planning",
        "owner": "dave",
        "members": [("alice", "member")],
    },
]

# Due dates are days from today
DEMO_TASKS = [
    {"team": "Engineering", "creator": "alice", "assignee": "bob", "title": "Set up CI pipeline",
     "priority": "high", "status": "in_progress", "due_in": 3},
    {"team": "Engineering", "creator": "bob", "assignee": "carol", "title": "Fix login redirect bug",
     "description": "Users land on a blank page after logging in", "priority": "urgent", "due_in": 1},
    {"team": "Engineering", "creator": "carol", "assignee": None, "title": "Write API documentation",
     "priority": "medium", "status": "todo", "due_in": 10},
    {"team": "Marketing", "creator": "dave", "assignee": "alice", "title": "Draft launch announcement",
     "priority": "medium", "status": "review", "due_in": 5},
]


def banner(title):
    print(f"\n{'='*60}")
    print(f"🚀 {title}")
    print(f"{'='*60}")


def seed_demo_users(session):
    """Create demo users in the database"""
    banner("Creating Demo Users")
    identities = IdentityStore(session)
    users = {}

    for user_data in DEMO_USERS:
        existing_user = identities.get_by_username(user_data["username"])
        if existing_user:
            print(f"[SKIP] User {user_data['username']} already exists, skipping...")
            users[user_data["username"]] = existing_user
            continue

        user = identities.register(user_data["username"], user_data["email"], DEMO_PASSWORD)
        users[user.username] = user
        print(f"[SUCCESS] Created user: {user.username} ({user.email})")

    return users


def seed_demo_teams(session, users):
    """Create demo teams in the database"""
    banner("Creating Demo Teams")
    registry = TeamRegistry(session)
    teams = {}

    for team_data in DEMO_TEAMS:
        owner = users[team_data["owner"]]
        existing = [t for t in registry.list_teams_for(owner.id) if t["name"] == team_data["name"]]
        if existing:
            print(f"[SKIP] Team {team_data['name']} already exists, skipping...")
            teams[team_data["name"]] = existing[0]["id"]
            continue

        team = registry.create_team(owner.id, team_data["name"], team_data["description"])
        for username, role in team_data["members"]:
            registry.add_member(owner.id, team.id, username, role)

        teams[team.name] = team.id
        print(f"[SUCCESS] Created team: {team.name} (Owner: {owner.username}, Members: {len(team_data['members']) + 1})")

    return teams


def seed_demo_tasks(session, users, teams):
    """Create demo tasks in the database"""
    banner("Creating Demo Tasks")
    registry = TaskRegistry(session)
    created = 0

    for task_data in DEMO_TASKS:
        creator = users[task_data["creator"]]
        team_id = teams[task_data["team"]]

        if registry.list_tasks(creator.id, team_id=team_id, search=task_data["title"]):
            print(f"[SKIP] Task {task_data['title']!r} already exists, skipping...")
            continue

        assignee = users[task_data["assignee"]].id if task_data["assignee"] else None
        task = registry.create_task(creator.id, team_id, {
            "title": task_data["title"],
            "description": task_data.get("description"),
            "assigned_to": assignee,
            "status": task_data.get("status"),
            "priority": task_data.get("priority"),
            "due_date": date.today() + timedelta(days=task_data["due_in"]),
        })
        created += 1
        print(f"[SUCCESS] Created task: {task.title} ({task.priority.value}, {task.status.value})")

    print(f"\n[SUCCESS] Successfully created {created} demo tasks!")


def main():
    if not create_tables():
        return 1

    session = SessionLocal()
    try:
        users = seed_demo_users(session)
        teams = seed_demo_teams(session, users)
        seed_demo_tasks(session, users, teams)
    except TaskManagerError as e:
        print(f"[ERROR] Seeding failed: {e.message}")
        return 1
    finally:
        session.close()

    banner("Seeding Complete")
    print(f"Log in as any of {', '.join(u['username'] for u in DEMO_USERS)} with password '{DEMO_PASSWORD}'")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
