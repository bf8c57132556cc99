import logging
import logging.handlers

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

# Fields passed through `extra=` by the orchestrator and the request middleware
CONTEXT_FIELDS = ("operation", "state")

FILE_FORMAT = (
    "%(asctime)s - %(levelname)s - "
    "[%(operation)s/%(state)s] "
    "%(filename)s:%(lineno)d in %(funcName)s() - "
    "%(message)s"
)


class RunContextFilter(logging.Filter):
    """Gives every record an operation and state so FILE_FORMAT always renders."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, "-")
        return True


def build_file_handler(settings: Settings) -> logging.Handler:
    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=settings.log_file_path,
        when="midnight",
        interval=1,
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    file_handler.setLevel(settings.log_level)
    file_handler.addFilter(RunContextFilter())
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return file_handler


def setup_logging(settings: Settings) -> None:
    settings.log_directory.mkdir(parents=True, exist_ok=True)

    rich_handler = RichHandler(
        console=Console(width=120),
        show_time=True,
        show_level=True,
        show_path=True,
        markup=True,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(settings.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(rich_handler)
    root_logger.addHandler(build_file_handler(settings))

    # Appliance polling goes through requests/urllib3; keep their chatter out
    for noisy in ("uvicorn.access", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info(
        f"[bold green]Logging initialized[/] - "
        f"File: [cyan]{settings.log_file_path}[/], "
        f"Level: [yellow]{settings.log_level}[/], "
        f"Retention: [blue]{settings.log_retention_days}[/] days"
    )
