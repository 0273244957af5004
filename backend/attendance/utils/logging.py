import logging
from datetime import datetime
from flask import request

EVENT_LOGGER_NAME = "attendance.events"
LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(name)s: %(message)s"

event_logger = logging.getLogger(EVENT_LOGGER_NAME)


def configure_logging(app):
    """
    Attach a stream handler to the app and event loggers using LOG_LEVEL.
    Safe to call once per app; repeated calls do not stack handlers.
    """
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    for logger in (app.logger, event_logger):
        logger.setLevel(level)
        if not any(getattr(h, "_attendance_handler", False) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler._attendance_handler = True
            logger.addHandler(handler)

    event_logger.propagate = False


def log_event(event_type, user_id=None, ip=None, description=None, level="INFO"):
    """
    Logs a security-related event (login, logout, failed login) on the event logger.

    Parameters:
        event_type (str): The type of the event (e.g., LOGIN_SUCCESS).
        user_id (int|None): The user ID, if available.
        ip (str|None): IP address, if available.
        description (str|None): Additional context.
        level (str): Log level name (INFO, WARNING, ERROR).
    """
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    entry = (
        f"[{timestamp}] EVENT: {event_type} | "
        f"USER: {user_id or 'N/A'} | IP: {ip or 'N/A'} | DESC: {description or 'N/A'}"
    )
    event_logger.log(getattr(logging, level.upper(), logging.INFO), entry)


def log_rate_limit_violation(request_limit):
    log_event(
        "RATE_LIMIT_EXCEEDED",
        ip=request.remote_addr,
        description=f"{request.method} {request.path} ({request_limit.limit})",
        level="WARNING",
    )
