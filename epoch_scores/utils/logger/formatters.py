import json
import logging

from colorama import Back, Fore, Style

from epoch_scores.utils.env import ENVIRONMENT_VARIABLES
from epoch_scores.utils.git import commit_short_hash
from epoch_scores.utils.logger.context import get_context
from epoch_scores.version import __version__


class JSONFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Back.WHITE,
    }

    def format(self, record):
        """
        Format the log record as JSON: level, message, run context, version and
        the structured `extra` payload of the call.
        """
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **get_context(),
            "version": __version__,
            "commit_hash": commit_short_hash,
        }

        extra_info = record.__dict__.get("_extra", None)

        if extra_info:
            log_record["data"] = extra_info

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Inline logs are for log collectors: single line, no colors
        if ENVIRONMENT_VARIABLES.INLINE_LOGS:
            return json.dumps(log_record, default=str)

        json_str = json.dumps(log_record, indent=2, default=str)

        level_color = self.COLORS.get(record.levelname, Fore.BLACK)
        colored_level = level_color + Style.BRIGHT + record.levelname + Style.RESET_ALL

        # Only the first occurrence is the level field
        return json_str.replace(record.levelname, colored_level, 1)
