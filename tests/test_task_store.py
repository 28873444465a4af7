"""
Tests for the TaskStore: defaults, patch merging, invariants and write-through.
"""

import json
import random
from datetime import datetime, timezone

import pytest

from taskflow.domain import Category, NotFound, Priority, Status, TaskPatch, ValidationError
from taskflow.services import TaskStore
from tests.conftest import REFERENCE_NOW
from tests.fakes import RecordingPersistence, sequential_ids


class TestCreate:

    def test_create_applies_documented_defaults(self, store):
        task = store.create()

        assert task.id == "task-1"
        assert task.title == "New Task"
        assert task.status == Status.TODO
        assert task.priority == Priority.MEDIUM
        assert task.category == Category.WORK
        assert task.time_spent == 0
        assert task.due_date is None
        assert task.created_at == REFERENCE_NOW

    def test_create_accepts_mapping_and_patch(self, store):
        a = store.create({"title": "Write tests", "category": "study", "priority": "high"})
        b = store.create(TaskPatch(title="Run", category=Category.HEALTH))

        assert a.category == Category.STUDY
        assert a.priority == Priority.HIGH
        assert b.category == Category.HEALTH
        assert b.priority == Priority.MEDIUM

    def test_ids_are_unique_even_if_factory_repeats(self, persistence, clock):
        ids = iter(["dup", "dup", "other"])
        store = TaskStore(persistence, clock=clock, id_factory=lambda: next(ids))

        first = store.create()
        second = store.create()

        assert first.id == "dup"
        assert second.id == "other"

    def test_empty_title_is_allowed(self, store):
        assert store.create({"title": ""}).title == ""

    def test_create_rejects_unknown_category(self, store):
        with pytest.raises(ValidationError) as exc_info:
            store.create({"category": "hobby"})
        assert exc_info.value.field == "category"
        assert len(store) == 0


class TestUpdate:

    def test_update_merges_only_supplied_fields(self, store):
        task = store.create({"title": "Draft", "description": "first pass", "priority": "low"})

        updated = store.update(task.id, {"status": "in-progress"})

        assert updated.status == Status.IN_PROGRESS
        assert updated.title == "Draft"
        assert updated.description == "first pass"
        assert updated.priority == Priority.LOW
        assert updated.created_at == task.created_at

    def test_update_accepts_camel_case_keys(self, store):
        task = store.create()
        updated = store.update(task.id, {"timeSpent": 45, "dueDate": "2026-04-01T00:00:00"})

        assert updated.time_spent == 45
        assert updated.due_date == datetime(2026, 4, 1)

    def test_update_can_clear_optional_fields(self, store):
        task = store.create({"description": "x", "due_date": datetime(2026, 4, 1)})
        updated = store.update(task.id, TaskPatch(description=None, due_date=None))

        assert updated.description is None
        assert updated.due_date is None

    def test_update_unknown_id_raises_not_found(self, store):
        with pytest.raises(NotFound):
            store.update("missing", {"title": "x"})

    @pytest.mark.parametrize("patch", [
        {"status": "done"},
        {"priority": "urgent"},
        {"category": "hobby"},
        {"time_spent": -1},
        {"status": None},
        {"title": None},
    ])
    def test_update_rejects_invalid_values(self, store, patch):
        task = store.create()

        with pytest.raises(ValidationError):
            store.update(task.id, patch)

        assert store.get(task.id) == task

    @pytest.mark.parametrize("field", ["id", "created_at", "createdAt"])
    def test_update_rejects_immutable_fields(self, store, field):
        task = store.create()

        with pytest.raises(ValidationError):
            store.update(task.id, {field: "2020-01-01T00:00:00"})

        assert store.get(task.id).created_at == REFERENCE_NOW

    def test_returned_tasks_are_copies(self, store):
        task = store.create({"title": "Original"})
        task.title = "Changed outside"

        listed = store.list()
        listed[0].title = "Changed again"

        assert store.get(task.id).title == "Original"


class TestDeleteAndList:

    def test_delete_unknown_id_raises_not_found(self, store):
        with pytest.raises(NotFound):
            store.delete("missing")

    def test_delete_reports_whether_task_was_bound(self, store):
        a = store.create()
        b = store.create()
        store.bind_session(a.id)

        assert store.delete(b.id) is False
        assert store.delete(a.id) is True
        assert store.active_task_id is None

    def test_delete_emits_signal(self, store):
        task = store.create()
        received = []
        store.task_deleted.connect(lambda task_id, was_active: received.append((task_id, was_active)))

        store.delete(task.id)

        assert received == [(task.id, False)]

    def test_list_length_tracks_creates_minus_deletes(self, store):
        rng = random.Random(7)
        created = []
        deletes = 0

        for _ in range(60):
            if created and rng.random() < 0.4:
                store.delete(created.pop(rng.randrange(len(created))))
                deletes += 1
            else:
                created.append(store.create().id)
            assert len(store.list()) == len(created)

        assert len(store) == 60 - 2 * deletes

    def test_list_keeps_creation_order_and_filters_by_status(self, store):
        a = store.create({"title": "a"})
        b = store.create({"title": "b", "status": "completed"})
        c = store.create({"title": "c"})

        assert [t.id for t in store.list()] == [a.id, b.id, c.id]
        assert [t.id for t in store.list(status=Status.COMPLETED)] == [b.id]
        assert [t.id for t in store.list(status="todo")] == [a.id, c.id]


class TestPersistence:

    def test_loads_once_and_saves_after_every_mutation(self, clock):
        persistence = RecordingPersistence()
        store = TaskStore(persistence, namespace="alice", clock=clock)

        task = store.create()
        store.update(task.id, {"title": "Renamed"})
        store.delete(task.id)

        assert persistence.loads == ["alice"]
        assert len(persistence.saves) == 3
        assert all(ns == "alice" for ns, _ in persistence.saves)

    def test_saved_payload_uses_camel_case_keys(self, clock):
        persistence = RecordingPersistence()
        store = TaskStore(persistence, namespace="alice", clock=clock, id_factory=sequential_ids())
        store.create({"title": "Report", "time_spent": 30})

        stored = json.loads(persistence.data["alice"])

        assert stored[0]["id"] == "task-1"
        assert stored[0]["timeSpent"] == 30
        assert stored[0]["status"] == "todo"
        assert "createdAt" in stored[0]
        assert "dueDate" in stored[0]

    def test_reopening_restores_tasks(self, persistence, clock):
        first = TaskStore(persistence, namespace="bob", clock=clock)
        task = first.create({"title": "Persist me", "priority": "high"})

        second = TaskStore(persistence, namespace="bob", clock=clock)

        assert second.get(task.id) == task
        assert len(TaskStore(persistence, namespace="someone-else")) == 0

    def test_failed_save_leaves_store_unchanged(self, clock):
        persistence = RecordingPersistence()
        store = TaskStore(persistence, clock=clock)
        task = store.create({"title": "Keep"})

        persistence.fail_saves = True
        with pytest.raises(OSError):
            store.update(task.id, {"title": "Lost"})
        with pytest.raises(OSError):
            store.delete(task.id)

        assert store.get(task.id).title == "Keep"

    def test_loads_legacy_browser_payload(self, clock):
        legacy = json.dumps([{
            "id": 1718000000000,
            "title": "Old task",
            "description": "",
            "category": "personal",
            "priority": "low",
            "status": "completed",
            "timeSpent": 12,
            "createdAt": "2026-03-10T08:30:00.000Z",
            "dueDate": None,
        }])
        store = TaskStore(RecordingPersistence({"default": legacy}), clock=clock)

        task = store.get("1718000000000")

        assert task.status == Status.COMPLETED
        assert task.time_spent == 12
        assert task.created_at.tzinfo is None
        expected = datetime(2026, 3, 10, 8, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert task.created_at == expected

    def test_invalid_stored_payload_raises_validation_error(self, clock):
        bad = json.dumps([{"id": "x", "createdAt": "2026-03-10T08:30:00", "status": "archived"}])

        with pytest.raises(ValidationError):
            TaskStore(RecordingPersistence({"default": bad}), clock=clock)

    def test_duplicate_stored_ids_are_rejected(self, clock):
        row = {"id": "x", "createdAt": "2026-03-10T08:30:00"}
        payload = json.dumps([row, row])

        with pytest.raises(ValidationError):
            TaskStore(RecordingPersistence({"default": payload}), clock=clock)
