import json
import logging
import os

# Structured fields callers may attach with ``extra={...}``
STRUCTURED_FIELDS = ("params", "response", "error")


class CustomFormatter(logging.Formatter):
    COLORS = {
        logging.DEBUG: "\x1b[36;21m",  # grey
        logging.INFO: "\x1b[32;21m",  # green
        logging.WARNING: "\x1b[33;21m",  # yellow
        logging.ERROR: "\x1b[31;21m",  # red
        logging.CRITICAL: "\x1b[31;1m",  # bold red
    }
    RESET = "\x1b[0m"
    FMT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s %(module)s.%(funcName)s:%(lineno)d | %(message)s"

    def format(self, record):
        color = self.COLORS.get(record.levelno, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        formatter = logging.Formatter(self.FMT, "%Y-%m-%d %H:%M:%S")
        line = formatter.format(record)

        fields = {
            name: getattr(record, name)
            for name in STRUCTURED_FIELDS
            if getattr(record, name, None) is not None
        }
        if fields:
            if isinstance(fields.get("error"), BaseException):
                err = fields["error"]
                fields["error"] = f"{type(err).__name__}: {err}"
            line = f"{line} {json.dumps(fields, default=str)}"
        return line


handler = logging.StreamHandler()
handler.setFormatter(CustomFormatter())

# Parse LOG_LEVEL from environment variable
log_level_str = os.getenv("LOG_LEVEL", "DEBUG").upper()
log_level = getattr(logging, log_level_str, logging.INFO)  # fallback if invalid

root_logger = logging.getLogger()
root_logger.setLevel(log_level)
root_logger.handlers = [handler]

# shutup werkzeug
logging.getLogger("werkzeug").setLevel(logging.WARNING)
