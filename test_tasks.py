from datetime import date

import pytest

from app.errors import Forbidden, InvalidAssignee, NoFieldsProvided, NotFound, ValidationError
from app.models.task import Task, TaskPriority, TaskStatus
from app.services.task_service import TaskRegistry, parse_priority, parse_status
from app.services.team_service import TeamRegistry


@pytest.fixture
def tasks(db):
    return TaskRegistry(db)


@pytest.fixture
def eng(db, alice, bob):
    """alice owns Eng; bob is a plain member"""
    teams = TeamRegistry(db)
    team = teams.create_team(alice.id, "Eng")
    teams.add_member(alice.id, team.id, "bob")
    return team


class TestParsing:
    def test_status_and_priority_are_case_insensitive(self):
        assert parse_status("In_Progress") is TaskStatus.IN_PROGRESS
        assert parse_priority(" URGENT ") is TaskPriority.URGENT

    @pytest.mark.parametrize("value", ["done", "", "blocked"])
    def test_unknown_status(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_status(value)
        assert exc.value.field == "status"


class TestCreateTask:
    def test_defaults(self, tasks, eng, alice):
        task = tasks.create_task(alice.id, eng.id, {"title": "  Write docs  "})
        assert task.title == "Write docs"
        assert task.status is TaskStatus.TODO
        assert task.priority is TaskPriority.LOW
        assert task.assigned_to is None
        assert task.created_by == alice.id
        assert task.team.name == "Eng"

    def test_all_fields(self, tasks, eng, alice, bob):
        task = tasks.create_task(alice.id, eng.id, {
            "title": "Ship it",
            "description": "release 1.0",
            "assigned_to": bob.id,
            "status": "review",
            "priority": "high",
            "due_date": "2026-12-01",
        })
        assert task.assignee.username == "bob"
        assert task.status is TaskStatus.REVIEW
        assert task.priority is TaskPriority.HIGH
        assert task.due_date == date(2026, 12, 1)

    def test_assignee_must_be_member(self, tasks, eng, alice, carol):
        with pytest.raises(InvalidAssignee):
            tasks.create_task(alice.id, eng.id, {"title": "Nope", "assigned_to": carol.id})
        assert tasks.db.query(Task).count() == 0

    def test_non_member_sees_team_not_found(self, tasks, eng, carol):
        with pytest.raises(NotFound) as exc:
            tasks.create_task(carol.id, eng.id, {"title": "Sneaky"})
        assert exc.value.message == "Team not found"

    @pytest.mark.parametrize("title", ["", "   ", "x" * 201])
    def test_title_bounds(self, tasks, eng, alice, title):
        with pytest.raises(ValidationError):
            tasks.create_task(alice.id, eng.id, {"title": title})

    def test_bad_due_date(self, tasks, eng, alice):
        with pytest.raises(ValidationError) as exc:
            tasks.create_task(alice.id, eng.id, {"title": "t", "due_date": "tomorrow"})
        assert exc.value.field == "due_date"


class TestGetTask:
    def test_outsider_and_missing_look_the_same(self, tasks, eng, alice, carol):
        task = tasks.create_task(alice.id, eng.id, {"title": "Secret"})
        with pytest.raises(NotFound):
            tasks.get_task(carol.id, task.id)
        with pytest.raises(NotFound):
            tasks.get_task(alice.id, 999)


class TestUpdateTask:
    def test_partial_update_keeps_other_fields(self, tasks, eng, alice, bob):
        task = tasks.create_task(alice.id, eng.id, {
            "title": "Original", "description": "keep me", "priority": "medium",
        })
        updated = tasks.update_task(bob.id, task.id, {"title": "Renamed"})
        assert updated.title == "Renamed"
        assert updated.description == "keep me"
        assert updated.priority is TaskPriority.MEDIUM

    def test_one_bad_field_changes_nothing(self, tasks, eng, alice):
        task = tasks.create_task(alice.id, eng.id, {"title": "Original"})
        with pytest.raises(ValidationError):
            tasks.update_task(alice.id, task.id, {"title": "Renamed", "status": "finished"})
        tasks.db.expire_all()
        reloaded = tasks.get_task(alice.id, task.id)
        assert reloaded.title == "Original"
        assert reloaded.status is TaskStatus.TODO

    def test_cannot_move_between_teams(self, db, tasks, eng, alice):
        other = TeamRegistry(db).create_team(alice.id, "Ops")
        task = tasks.create_task(alice.id, eng.id, {"title": "Stay put"})
        with pytest.raises(ValidationError) as exc:
            tasks.update_task(alice.id, task.id, {"team_id": other.id})
        assert exc.value.field == "team_id"

    def test_empty_update(self, tasks, eng, alice):
        task = tasks.create_task(alice.id, eng.id, {"title": "t"})
        with pytest.raises(NoFieldsProvided):
            tasks.update_task(alice.id, task.id, {})

    def test_assign_and_unassign(self, tasks, eng, alice, bob, carol):
        task = tasks.create_task(alice.id, eng.id, {"title": "t"})
        with pytest.raises(InvalidAssignee):
            tasks.update_task(alice.id, task.id, {"assigned_to": carol.id})

        assert tasks.update_task(alice.id, task.id, {"assigned_to": bob.id}).assigned_to == bob.id
        assert tasks.update_task(alice.id, task.id, {"assigned_to": None}).assigned_to is None

    def test_update_status(self, tasks, eng, alice, bob):
        task = tasks.create_task(alice.id, eng.id, {"title": "t"})
        assert tasks.update_status(bob.id, task.id, "completed").status is TaskStatus.COMPLETED

    def test_outsider_cannot_update(self, tasks, eng, alice, carol):
        task = tasks.create_task(alice.id, eng.id, {"title": "t"})
        with pytest.raises(NotFound):
            tasks.update_task(carol.id, task.id, {"title": "mine"})


class TestDeleteTask:
    def test_assignee_cannot_delete_owners_task(self, tasks, eng, alice, bob):
        task = tasks.create_task(alice.id, eng.id, {"title": "Fix bug", "assigned_to": bob.id})
        with pytest.raises(Forbidden):
            tasks.delete_task(bob.id, task.id)

        tasks.delete_task(alice.id, task.id)
        with pytest.raises(NotFound):
            tasks.get_task(alice.id, task.id)

    def test_creator_deletes_own(self, tasks, eng, bob):
        task = tasks.create_task(bob.id, eng.id, {"title": "Mine"})
        tasks.delete_task(bob.id, task.id)
        assert tasks.db.query(Task).count() == 0

    def test_missing(self, tasks, alice):
        with pytest.raises(NotFound):
            tasks.delete_task(alice.id, 999)


class TestListTasks:
    @pytest.fixture
    def seeded(self, db, tasks, eng, alice, bob, carol):
        ops = TeamRegistry(db).create_team(carol.id, "Ops")
        tasks.create_task(alice.id, eng.id, {"title": "Fix Login", "priority": "high", "assigned_to": bob.id})
        tasks.create_task(alice.id, eng.id, {"title": "Docs", "description": "LOGIN flow", "status": "review"})
        tasks.create_task(bob.id, eng.id, {"title": "Refactor"})
        tasks.create_task(carol.id, ops.id, {"title": "Login audit"})
        return ops

    def test_only_member_teams_newest_first(self, tasks, seeded, alice):
        titles = [t.title for t in tasks.list_tasks(alice.id)]
        assert titles == ["Refactor", "Docs", "Fix Login"]

    def test_filters(self, tasks, seeded, eng, alice, bob):
        assert [t.title for t in tasks.list_tasks(alice.id, assigned_to=bob.id)] == ["Fix Login"]
        assert [t.title for t in tasks.list_tasks(alice.id, status="review")] == ["Docs"]
        assert [t.title for t in tasks.list_tasks(alice.id, priority="high")] == ["Fix Login"]
        assert len(tasks.list_tasks(alice.id, team_id=eng.id)) == 3

    def test_other_team_filter_is_empty(self, tasks, seeded, alice):
        assert tasks.list_tasks(alice.id, team_id=seeded.id) == []

    def test_search_is_case_insensitive_over_title_and_description(self, tasks, seeded, alice):
        assert [t.title for t in tasks.list_tasks(alice.id, search="login")] == ["Docs", "Fix Login"]

    def test_search_treats_wildcards_literally(self, tasks, seeded, alice):
        assert tasks.list_tasks(alice.id, search="%") == []

    def test_search_folds_non_ascii_case(self, tasks, eng, alice):
        tasks.create_task(alice.id, eng.id, {"title": "ÉCOLE rollout"})
        tasks.create_task(alice.id, eng.id, {"title": "Audit", "description": "Überprüfung der Logs"})

        assert [t.title for t in tasks.list_tasks(alice.id, search="école")] == ["ÉCOLE rollout"]
        assert [t.title for t in tasks.list_tasks(alice.id, search="ÜBERPRÜFUNG")] == ["Audit"]

    def test_listing_is_repeatable(self, tasks, seeded, alice):
        first = [t.id for t in tasks.list_tasks(alice.id)]
        assert [t.id for t in tasks.list_tasks(alice.id)] == first

    def test_invalid_filter_value(self, tasks, seeded, alice):
        with pytest.raises(ValidationError):
            tasks.list_tasks(alice.id, priority="critical")
