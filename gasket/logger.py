import logging

from rich.logging import RichHandler

log = logging.getLogger("gasket")


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a rich console handler to the gasket logger and set its level."""
    if not any(isinstance(handler, RichHandler) for handler in log.handlers):
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        log.addHandler(handler)
    log.setLevel(level)
    return log
