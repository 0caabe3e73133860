import logging
import sys

# ANSI colors per level name
COLORS = {
    'TRACE': '\033[90m',     # Gray
    'DEBUG': '\033[36m',     # Cyan
    'INFO': '\033[32m',      # Green
    'WARNING': '\033[33m',   # Yellow
    'ERROR': '\033[31m',     # Red
    'CRITICAL': '\033[35m',  # Magenta
}
RESET = '\033[0m'

SHORT_FORMAT = '%(levelname)s | %(message)s'
VERBOSE_FORMAT = '%(levelname)s | %(filename)s:%(lineno)d | %(message)s'


class ColoredFormatter(logging.Formatter):
    """Pads and colors the level name. Colors are skipped when the stream is
    not a terminal, so piped output stays clean."""

    def __init__(self, fmt=None, use_color=True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record):
        color = COLORS.get(record.levelname, '') if self.use_color else ''
        # format a copy, other handlers should see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname: <8}{RESET if color else ''}"
        return super().format(record)


# per-node layout and tween chatter, below DEBUG
TRACE = 5

logging.addLevelName(TRACE, 'TRACE')


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, stacklevel=2, **kwargs)


logging.Logger.trace = trace


def _formatter(fmt):
    return ColoredFormatter(fmt, use_color=hasattr(sys.stderr, 'isatty') and sys.stderr.isatty())


handler = logging.StreamHandler(sys.stderr)
handler.setFormatter(_formatter(SHORT_FORMAT))

logger = logging.getLogger('treezoom')
logger.addHandler(handler)
logger.setLevel('INFO')


def set_verbosity(level):
    """0 = INFO, 1 = DEBUG with file:line, 2+ = TRACE."""
    handler.setFormatter(_formatter(VERBOSE_FORMAT if level >= 1 else SHORT_FORMAT))
    if level <= 0:
        logger.setLevel('INFO')
    elif level == 1:
        logger.setLevel('DEBUG')
    else:
        logger.setLevel(TRACE)
