import os
from datetime import time, timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from django.utils import timezone

from catalog.models import Program, ProgramCategory, ProgramClass, Session, SessionTime
from traction_rec_import.cleaner import Cleaner
from traction_rec_import.engine import JsonMigrationEngine, get_migration_engine
from traction_rec_import.exceptions import MigrationBusyError, SnapshotFormatError
from traction_rec_import.models import MigrationTask

from .utils import PROGRAMS, SESSIONS, SnapshotDirectoryMixin, write_snapshot

MIGRATION_NAMES = [
    "traction_rec_programs",
    "traction_rec_categories",
    "traction_rec_classes",
    "traction_rec_sessions",
]


class GetMigrationEngineTests(TestCase):
    def test_default_engine(self):
        self.assertIsInstance(get_migration_engine(), JsonMigrationEngine)

    def test_configured_engine(self):
        with override_settings(
            TRACTION_REC={"MIGRATION_ENGINE": "unittest.mock.Mock"}
        ):
            self.assertIsInstance(get_migration_engine(), mock.Mock)


class StatusTests(TestCase):
    def setUp(self):
        self.engine = JsonMigrationEngine(stuck_after=3600)

    def test_registers_tasks_as_idle(self):
        status = self.engine.status("traction_rec_import")

        self.assertEqual(status, {name: "idle" for name in MIGRATION_NAMES})
        self.assertEqual(
            list(MigrationTask.objects.values_list("name", flat=True)),
            MIGRATION_NAMES,
        )

    def test_running_and_stuck(self):
        self.engine.status("traction_rec_import")
        MigrationTask.objects.filter(name="traction_rec_classes").update(
            status=MigrationTask.Status.RUNNING,
            last_started=timezone.now() - timedelta(minutes=5),
        )
        MigrationTask.objects.filter(name="traction_rec_sessions").update(
            status=MigrationTask.Status.RUNNING,
            last_started=timezone.now() - timedelta(hours=2),
        )

        status = self.engine.status("traction_rec_import")

        self.assertEqual(status["traction_rec_programs"], "idle")
        self.assertEqual(status["traction_rec_classes"], "running")
        self.assertEqual(status["traction_rec_sessions"], "stuck")

    def test_unknown_group(self):
        self.assertEqual(self.engine.status("other_group"), {})


class RunTests(SnapshotDirectoryMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.engine = JsonMigrationEngine()

    def test_import(self):
        directory = write_snapshot(self.json_directory)

        results = self.engine.run(directory)

        self.assertEqual(list(results), MIGRATION_NAMES)
        self.assertEqual(Program.objects.count(), 2)
        self.assertEqual(ProgramCategory.objects.count(), 1)
        self.assertEqual(ProgramClass.objects.count(), 1)
        self.assertEqual(Session.objects.count(), 2)

        category = ProgramCategory.objects.get()
        self.assertEqual(category.program.source_id, "a0P000000000001")
        program_class = ProgramClass.objects.get()
        self.assertEqual(program_class.category, category)

        session = Session.objects.get(source_id="a0S000000000001")
        self.assertEqual(session.program_class, program_class)
        self.assertEqual(session.location, "Downtown YMCA")
        self.assertEqual(session.capacity, 8)
        self.assertEqual(session.spots_available, 3)
        self.assertEqual(session.price, Decimal("45.5"))

        session_time = session.times.get()
        self.assertEqual(session_time.start_time, time(9, 30))
        self.assertEqual(session_time.end_time, time(10, 0))
        self.assertEqual(session_time.start_date.isoformat(), "2024-02-05")
        self.assertEqual(session_time.days, "Monday")

        for task in MigrationTask.objects.all():
            self.assertEqual(task.status, MigrationTask.Status.IDLE)
            self.assertIsNotNone(task.last_finished)
        sessions_task = MigrationTask.objects.get(name="traction_rec_sessions")
        self.assertEqual(sessions_task.processed, 2)
        self.assertEqual(sessions_task.last_message, "Imported 2 records, deleted 0")

    def test_reimport_is_idempotent(self):
        directory = write_snapshot(self.json_directory)
        self.engine.run(directory)
        self.engine.run(directory)

        self.assertEqual(Program.objects.count(), 2)
        self.assertEqual(Session.objects.count(), 2)
        # Each re-import attaches a fresh schedule and orphans the old one
        self.assertEqual(SessionTime.objects.count(), 4)
        for session in Session.objects.all():
            self.assertEqual(session.times.count(), 1)

    def test_reimport_orphans_are_removed_by_database_clean_up(self):
        directory = write_snapshot(self.json_directory)
        self.engine.run(directory)
        self.engine.run(directory)

        orphans = SessionTime.objects.filter(
            parent_id__isnull=True, parent_type__isnull=True
        )
        self.assertEqual(orphans.count(), 2)

        self.assertEqual(Cleaner(self.import_settings).clean_database(), 2)
        self.assertEqual(orphans.count(), 0)
        self.assertEqual(SessionTime.objects.count(), 2)

    def test_sync_deletes_missing_records(self):
        self.engine.run(write_snapshot(self.json_directory, name="20240101000000"))
        newer = write_snapshot(
            self.json_directory,
            name="20240102000000",
            programs=PROGRAMS[:1],
            sessions=SESSIONS[1:],
        )

        self.engine.run(newer)
        self.assertEqual(Program.objects.count(), 2)
        self.assertEqual(Session.objects.count(), 2)

        self.engine.run(newer, sync=True)
        self.assertEqual(
            list(Program.objects.values_list("source_id", flat=True)),
            ["a0P000000000001"],
        )
        self.assertEqual(
            list(Session.objects.values_list("source_id", flat=True)),
            ["a0S000000000002"],
        )
        self.assertEqual(
            MigrationTask.objects.get(name="traction_rec_sessions").deleted, 1
        )

    def test_missing_file_is_skipped(self):
        directory = write_snapshot(
            self.json_directory, categories=None, classes=None, sessions=None
        )

        self.engine.run(directory, sync=True)

        self.assertEqual(Program.objects.count(), 2)
        task = MigrationTask.objects.get(name="traction_rec_sessions")
        self.assertTrue(task.last_message.startswith("Skipped: sessions.json"))
        self.assertEqual(task.status, MigrationTask.Status.IDLE)

    def test_invalid_json_fails_and_frees_task(self):
        directory = write_snapshot(self.json_directory)
        with open(os.path.join(directory, "classes.json"), "w") as f:
            f.write("{not json")

        with self.assertRaises(SnapshotFormatError):
            self.engine.run(directory)

        task = MigrationTask.objects.get(name="traction_rec_classes")
        self.assertEqual(task.status, MigrationTask.Status.IDLE)
        self.assertTrue(task.last_message.startswith("Failed:"))
        # Migrations before the failing one were committed
        self.assertEqual(Program.objects.count(), 2)
        self.assertFalse(Session.objects.exists())

    def test_failure_rolls_back_the_migration(self):
        directory = write_snapshot(
            self.json_directory, programs=[PROGRAMS[0], {"Name": "No Id"}]
        )

        with self.assertRaises(SnapshotFormatError):
            self.engine.run(directory)

        self.assertFalse(Program.objects.exists())
        task = MigrationTask.objects.get(name="traction_rec_programs")
        self.assertEqual(task.processed, 0)

    def test_non_list_file(self):
        directory = write_snapshot(self.json_directory, programs={"records": []})

        with self.assertRaises(SnapshotFormatError):
            self.engine.run(directory)

    def test_missing_directory(self):
        with self.assertRaises(SnapshotFormatError):
            self.engine.run(os.path.join(self.json_directory, "20240101000000"))

    def test_busy_task(self):
        directory = write_snapshot(self.json_directory)
        MigrationTask.objects.create(
            name="traction_rec_programs",
            group="traction_rec_import",
            weight=10,
            status=MigrationTask.Status.RUNNING,
            last_started=timezone.now(),
        )

        with self.assertRaises(MigrationBusyError):
            self.engine.run(directory)

        self.assertFalse(Program.objects.exists())
        self.assertEqual(
            MigrationTask.objects.get(name="traction_rec_programs").status,
            MigrationTask.Status.RUNNING,
        )


class RollbackTests(SnapshotDirectoryMixin, TestCase):
    def test_rollback(self):
        engine = JsonMigrationEngine()
        engine.run(write_snapshot(self.json_directory))

        results = engine.rollback("traction_rec_import")

        self.assertEqual(list(results), list(reversed(MIGRATION_NAMES)))
        self.assertEqual(results["traction_rec_sessions"], 2)
        self.assertFalse(Program.objects.exists())
        self.assertFalse(ProgramCategory.objects.exists())
        self.assertFalse(ProgramClass.objects.exists())
        self.assertFalse(Session.objects.exists())
        # Session times are left for the database clean-up
        self.assertTrue(all(t.is_orphaned for t in SessionTime.objects.all()))

        task = MigrationTask.objects.get(name="traction_rec_programs")
        self.assertEqual(task.last_message, "Rolled back 2 records")
        self.assertEqual(task.processed, 0)
        self.assertEqual(task.deleted, 2)


class ResetStatusTests(TestCase):
    def setUp(self):
        self.engine = JsonMigrationEngine(stuck_after=3600)
        self.engine.status("traction_rec_import")
        MigrationTask.objects.create(
            name="other_task", group="other_group", status=MigrationTask.Status.RUNNING
        )

    def test_resets_running_and_stuck_tasks(self):
        MigrationTask.objects.filter(name="traction_rec_programs").update(
            status=MigrationTask.Status.RUNNING,
            last_started=timezone.now() - timedelta(hours=5),
        )
        MigrationTask.objects.filter(name="traction_rec_classes").update(
            status=MigrationTask.Status.RUNNING,
            last_started=timezone.now() - timedelta(minutes=5),
        )

        self.assertEqual(self.engine.reset_status("traction_rec_import"), 2)

        self.assertEqual(
            self.engine.status("traction_rec_import"),
            {name: "idle" for name in MIGRATION_NAMES},
        )
        task = MigrationTask.objects.get(name="traction_rec_programs")
        self.assertEqual(task.last_message, "Reset by operator")
        self.assertIsNotNone(task.last_finished)
        # Tasks of other groups are left alone
        self.assertEqual(
            MigrationTask.objects.get(name="other_task").status,
            MigrationTask.Status.RUNNING,
        )

    def test_idle_tasks_are_untouched(self):
        self.assertEqual(self.engine.reset_status("traction_rec_import"), 0)
        self.assertFalse(
            MigrationTask.objects.filter(last_message="Reset by operator").exists()
        )

    def test_reset_task_can_be_claimed_again(self):
        migration = self.engine.get_migrations("traction_rec_import")[0]
        self.engine.claim(migration)
        with self.assertRaises(MigrationBusyError):
            self.engine.claim(migration)

        self.engine.reset_status("traction_rec_import")

        self.assertEqual(
            self.engine.claim(migration).status, MigrationTask.Status.RUNNING
        )
