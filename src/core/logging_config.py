import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "quiz-scoring-engine"
LOG_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"

# Quiz context the engine attaches through `extra=`; emitted only when present
QUIZ_CONTEXT_FIELDS = ("quiz_id", "score", "tier", "missing")


class QuizJsonFormatter(JsonFormatter):
    """
    One JSON object per line, tagged with the service name and an ISO-8601
    UTC timestamp. Quiz context passed via `extra` (see QUIZ_CONTEXT_FIELDS)
    comes through as top-level keys.
    """

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['service'] = SERVICE_NAME
        log_record['source'] = f"{record.module}:{record.lineno}"
        for field in QUIZ_CONTEXT_FIELDS:
            if log_record.get(field) is None:
                log_record.pop(field, None)


def quiz_log_context(quiz_id: str, **fields) -> dict:
    """Builds the `extra` mapping for a log call about one quiz."""
    context = {"quiz_id": quiz_id}
    context.update({k: v for k, v in fields.items() if k in QUIZ_CONTEXT_FIELDS})
    return context


def setup_logging(log_level_str: str = "INFO"):
    """
    Configures structured JSON logging on the root logger.
    Safe to call more than once; the JSON handler is only attached the first time.
    """
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if any(isinstance(h.formatter, QuizJsonFormatter) for h in root_logger.handlers):
        root_logger.debug(f"JSON logging already configured, level now {logging.getLevelName(log_level)}")
        return

    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setFormatter(QuizJsonFormatter(LOG_FORMAT))
    root_logger.addHandler(log_handler)
    root_logger.info(f"Structured JSON logging configured with level: {logging.getLevelName(log_level)}")
