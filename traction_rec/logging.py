import warnings
from types import MappingProxyType
from typing import Any, Callable, Optional

import structlog

# Default global registry for semantic context extractors
_DEFAULT_EXTRACTORS: dict[str, Callable[[Any], dict[str, Any]]] = {}


def _register_default_extractor(
    context_key: str, extractor_function: Callable[[Any], dict[str, Any]]
):
    _DEFAULT_EXTRACTORS[context_key] = extractor_function


# Built-in extractors
_register_default_extractor(
    "snapshot",
    lambda snapshot: {
        "snapshot_directory": getattr(snapshot, "directory", None),
        "snapshot_id": getattr(snapshot, "pk", None),
    },
)

_register_default_extractor(
    "migration",
    lambda migration: {
        "migration_name": getattr(migration, "name", None),
        "migration_group": getattr(migration, "group", None),
    },
)

_register_default_extractor(
    "session",
    lambda session: {
        "session_source_id": getattr(session, "source_id", None),
    },
)

# Freeze default extractors to prevent mutation
_DEFAULT_EXTRACTORS = MappingProxyType(_DEFAULT_EXTRACTORS)


class TractionRecLogger:
    """
    A structured logging wrapper around structlog that enforces consistent logging
    conventions across the Traction Rec import.

    Features:
        - Requires 'message' and 'event_code' for all logs, and 'reason'/'reason_code'
          for warnings/errors.
        - Automatically extracts common context from objects like SnapshotImport,
          MigrationTask and Session.
        - Allows semantic binding of objects (e.g., snapshot=snapshot_import) which
          are expanded at log time.
        - Supports binding persistent fields via structlog's context mechanism.

    Usage:
    -----

    Create a logger:
        ```python
        structured_logger = TractionRecLogger.get_logger(__name__)
        ```

    Log an info-level event:
        ```python
        structured_logger.info(
            "Snapshot directory imported.",
            event_code="snapshot_import_completed",
            snapshot=snapshot_import,
        )
        ```

    Log a warning with reason:
        ```python
        structured_logger.warning(
            "Import skipped.",
            event_code="import_lock_unavailable",
            reason="Another import process already holds the lock.",
            reason_code="lock_held",
        )
        ```

    Bind a logger for repeated use:
        ```python
        my_logger = structured_logger.bind(migration=task)
        my_logger.info("Migration finished.", event_code="migration_finished")
        ```

    Special Context Expansion:
    --------------------------

    The logger recognizes certain context object names and extracts fields from them
    automatically:

    - `snapshot` -> `snapshot_directory`, `snapshot_id`
    - `migration` -> `migration_name`, `migration_group`
    - `session` -> `session_source_id`

    Explicit values passed (e.g., `migration_name=...`) override extracted ones.
    Fields with `None` values are omitted from the final log output.

    Extractors are callables that take a single object and return a dictionary.
    Registering a new extractor on a logger overrides the default for that logger
    only:
        ```python
        logger = TractionRecLogger.get_logger(__name__)
        logger.register_extractor("program", lambda p: {"program_id": p.source_id})
        ```
    """

    def __init__(self, logger, context: Optional[dict[str, Any]] = None):
        self._logger = logger
        self._context = context or {}
        self._extractors = _DEFAULT_EXTRACTORS.copy()

    @classmethod
    def get_logger(cls, name: str) -> "TractionRecLogger":
        """
        Factory method to create a TractionRecLogger from a given logger name.

        Args:
            name (str): The module name; the structlog logger is named
                f"structlog.{name}".

        Returns:
            TractionRecLogger: A logger instance with enriched behavior.
        """
        return cls(structlog.get_logger(f"structlog.{name}"))

    def register_extractor(
        self, key: str, extractor: Callable[[Any], dict[str, Any]]
    ) -> None:
        """
        Register a custom context extractor for this logger instance only.

        Args:
            key (str): The context key to extract (e.g., "custom_object").
            extractor (Callable): A function that returns a dict of fields to log.
        """
        self._extractors[key] = extractor
        if key in _DEFAULT_EXTRACTORS:
            warnings.warn(
                f"Extractor for '{key}' overrides a default extractor for this "
                f"logger only.",
                UserWarning,
                stacklevel=2,
            )

    def unregister_extractor(self, key: str) -> None:
        """
        Remove a previously registered extractor from this logger instance.

        Args:
            key (str): The context key to remove.
        """
        self._extractors.pop(key, None)

    def log(
        self,
        level: str,
        message: str,
        *,
        event_code: str,
        reason: Optional[str] = None,
        reason_code: Optional[str] = None,
        **context: Any,
    ) -> None:
        """
        Emit structured logs with standardized context. This shouldn't be called
        directly under ordinary circumstances, with one of the level methods (
        debug, info, warning, error, exception) used instead.

        Args:
            level (str): Logging level ('debug', 'info', 'warning', 'error',
                'exception').
            message (str): Human-readable log message.
            event_code (str): Required short machine-readable identifier.
            reason (str, optional): Human-readable reason for failure (required for
                warnings/errors).
            reason_code (str, optional): Short identifier for reason (required for
                warnings/errors).
            context (Any): Additional structured context for the log.

        Raises:
            ValueError: If required fields are missing for the given log level.
        """
        if not message:
            raise ValueError("Log message is required.")
        if not event_code:
            raise ValueError("Structured logs must include an 'event_code' field.")
        if level in ("warning", "error") and (not reason or not reason_code):
            raise ValueError(
                "Warnings and errors must include both 'reason' and 'reason_code'."
            )

        context_data = {"event_code": event_code}
        if reason:
            context_data["reason"] = reason
        if reason_code:
            context_data["reason_code"] = reason_code

        bound_context = self._context

        # Extract data from provided context, falling back to the bound context
        # if it exists
        for context_key, extractor_function in self._extractors.items():
            context_object = context.pop(context_key, bound_context.get(context_key))
            if context_object:
                extracted_fields = extractor_function(context_object)
                for key, value in extracted_fields.items():
                    if value is not None:
                        context_data.setdefault(key, value)

        # Add remaining values in bound_context
        # (i.e., keys that weren't already extracted)
        for key, value in bound_context.items():
            if key not in self._extractors and key not in context and value is not None:
                context_data[key] = value

        # Explicit values win over extracted and bound ones
        for key, value in context.items():
            if value is not None:
                context_data[key] = value

        getattr(self._logger, level)(message, **context_data)

    def debug(self, message: str, *, event_code: str, **kwargs):
        """Emit a debug-level structured log."""
        self.log("debug", message, event_code=event_code, **kwargs)

    def info(self, message: str, *, event_code: str, **kwargs):
        """Emit an info-level structured log."""
        self.log("info", message, event_code=event_code, **kwargs)

    def warning(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **kwargs
    ):
        """Emit a warning-level structured log. Requires reason and reason_code."""
        self.log(
            "warning",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **kwargs,
        )

    def error(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **kwargs
    ):
        """Emit an error-level structured log. Requires reason and reason_code."""
        self.log(
            "error",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **kwargs,
        )

    def exception(self, message: str, *, event_code: str, **kwargs):
        """
        Emit an error-level structured log with the active exception attached.

        Only meaningful inside an ``except`` block.
        """
        self.log("exception", message, event_code=event_code, **kwargs)

    def bind(self, **kwargs: Any) -> "TractionRecLogger":
        """
        Return a new TractionRecLogger with additional context permanently bound.

        Args:
            **kwargs: Context to bind.

        Returns:
            TractionRecLogger: A logger with the provided context bound.
        """
        # We make our own bound context rather than using structlog's
        # .bind so we can safely access it ourselves
        new_context = self._context.copy()
        new_context.update(kwargs)
        return TractionRecLogger(self._logger, context=new_context)
