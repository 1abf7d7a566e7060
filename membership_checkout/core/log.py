import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()

# Libraries that log every HTTP round trip at INFO
_NOISY_LOGGERS = ('stripe', 'httpx', 'httpcore')


def setup_logging(level: str = 'INFO') -> None:
    """Route the root logger through a rich console handler.

    Safe to call more than once; the previous rich handler is replaced.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter('%(name)s | %(message)s'))
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
