"""
Fire-and-forget telemetry sink.
"""
import json
import logging
from typing import Any, Literal

logger = logging.getLogger(__name__)

TelemetryLevel = Literal["debug", "info", "warning", "error"]


class TelemetrySink:
    """Emit structured telemetry records through the logging module.

    Sink failures are logged and dropped; they never reach the pipeline.
    """

    def __init__(self, logger_name: str = "morning_brief.telemetry.events"):
        self._logger = logging.getLogger(logger_name)

    def emit(
        self,
        source: str,
        event: str,
        data: dict[str, Any] | None = None,
        level: TelemetryLevel = "info",
    ) -> None:
        record = {
            "level": level,
            "source": source,
            "event": event,
            "data": data or {},
        }
        try:
            self.write(record)
        except Exception:
            logger.warning("Dropped telemetry event %s.%s", source, event, exc_info=True)

    def write(self, record: dict[str, Any]) -> None:
        """Write one record. Subclasses may forward to other stores."""
        level = logging.getLevelName(record["level"].upper())
        self._logger.log(level, json.dumps(record, default=str, sort_keys=True))
