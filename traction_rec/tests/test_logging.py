from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase

from traction_rec.logging import TractionRecLogger


class TractionRecLoggerTests(SimpleTestCase):
    def setUp(self):
        self.mock_structlog_logger = MagicMock()
        self.logger = TractionRecLogger(self.mock_structlog_logger)

    def test_info_logs_with_event(self):
        self.logger.info("info msg", event_code="info_event", key="value")
        args, kwargs = self.mock_structlog_logger.info.call_args
        self.assertEqual(args[0], "info msg")
        self.assertEqual(kwargs["event_code"], "info_event")
        self.assertEqual(kwargs["key"], "value")

    def test_missing_event_code_raises(self):
        with self.assertRaises(ValueError):
            self.logger.info("msg", event_code=None)

    def test_missing_message_raises(self):
        with self.assertRaises(ValueError):
            self.logger.info("", event_code="event")

    def test_warning_requires_reason_and_reason_code(self):
        with self.assertRaises(TypeError):
            self.logger.warning("msg", event_code="event", reason="only reason")

        with self.assertRaises(ValueError):
            self.logger.warning("msg", event_code="event", reason="", reason_code="x")

        self.logger.warning(
            "msg", event_code="event", reason="lock held", reason_code="lock_held"
        )
        args, kwargs = self.mock_structlog_logger.warning.call_args
        self.assertEqual(kwargs["reason"], "lock held")
        self.assertEqual(kwargs["reason_code"], "lock_held")

    def test_error_requires_reason_and_reason_code(self):
        with self.assertRaises(TypeError):
            self.logger.error("msg", event_code="event", reason_code="only_code")

    def test_snapshot_extractor(self):
        snapshot = SimpleNamespace(directory="/data/20240101000000", pk=3)
        self.logger.info("msg", event_code="event", snapshot=snapshot)
        args, kwargs = self.mock_structlog_logger.info.call_args
        self.assertEqual(kwargs["snapshot_directory"], "/data/20240101000000")
        self.assertEqual(kwargs["snapshot_id"], 3)
        self.assertNotIn("snapshot", kwargs)

    def test_migration_extractor_with_explicit_override(self):
        migration = SimpleNamespace(name="traction_rec_sessions", group="g")
        self.logger.info(
            "msg", event_code="event", migration=migration, migration_group="other"
        )
        args, kwargs = self.mock_structlog_logger.info.call_args
        self.assertEqual(kwargs["migration_name"], "traction_rec_sessions")
        self.assertEqual(kwargs["migration_group"], "other")

    def test_none_values_are_omitted(self):
        self.logger.info("msg", event_code="event", empty=None)
        args, kwargs = self.mock_structlog_logger.info.call_args
        self.assertNotIn("empty", kwargs)

    def test_bind_applies_context(self):
        session = SimpleNamespace(source_id="a0B000000000001")
        bound = self.logger.bind(session=session, run="nightly")
        self.assertIsInstance(bound, TractionRecLogger)
        bound.info("msg", event_code="event")
        args, kwargs = self.mock_structlog_logger.info.call_args
        self.assertEqual(kwargs["session_source_id"], "a0B000000000001")
        self.assertEqual(kwargs["run"], "nightly")
        # The original logger is unchanged
        self.assertEqual(self.logger._context, {})

    def test_register_extractor_overriding_default_warns(self):
        with self.assertWarns(UserWarning):
            self.logger.register_extractor("session", lambda o: {"session_id": 1})

    def test_unregister_extractor(self):
        self.logger.register_extractor("thing", lambda o: {"thing_id": o.id})
        self.logger.unregister_extractor("thing")
        self.logger.info("msg", event_code="event", thing=SimpleNamespace(id=1))
        args, kwargs = self.mock_structlog_logger.info.call_args
        self.assertNotIn("thing_id", kwargs)

    def test_exception_uses_exception_level(self):
        self.logger.exception("failed", event_code="event")
        self.mock_structlog_logger.exception.assert_called_once()

    @patch("traction_rec.logging.structlog.get_logger")
    def test_get_logger_prefixes_name(self, mock_get_logger):
        logger = TractionRecLogger.get_logger("traction_rec_import.importer")
        mock_get_logger.assert_called_once_with("structlog.traction_rec_import.importer")
        self.assertIsInstance(logger, TractionRecLogger)
