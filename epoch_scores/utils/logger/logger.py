import logging

from epoch_scores.utils.logger.context import add_context, start_run, start_trace
from epoch_scores.utils.logger.formatters import JSONFormatter


class EpochScoresLogger(logging.Logger):
    @property
    def add_context(self):
        return add_context

    @property
    def start_run(self):
        return start_run

    @property
    def start_trace(self):
        return start_trace


logging.setLoggerClass(EpochScoresLogger)


# Keep the raw `extra` dict on the record so the formatter can nest it under "data"
def make_record_with_extra(self, *args, **kwargs):
    record = original_makeRecord(self, *args, **kwargs)

    record._extra = args[-2]

    return record


original_makeRecord = logging.Logger.makeRecord
logging.Logger.makeRecord = make_record_with_extra


def create_logger(
    name: str = None,
    level: int = logging.DEBUG,
) -> EpochScoresLogger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    json_handler = logging.StreamHandler()
    json_handler.setFormatter(JSONFormatter())

    logger.handlers.clear()
    logger.addHandler(json_handler)

    return logger


def set_alembic_logger():
    # Alembic logs every migration step through its own logger
    alembic_logger = logging.getLogger("alembic")
    alembic_logger.setLevel(logging.WARNING)
    alembic_logger.propagate = False

    json_handler = logging.StreamHandler()
    json_handler.setFormatter(JSONFormatter())

    alembic_logger.handlers.clear()
    alembic_logger.addHandler(json_handler)

    return alembic_logger


logger = create_logger("epoch_scores")
