"""Console logging with ANSI colors.

Lines look like::

    14:02:11.084 | INFO     | services.connection  | [00:01.42] Connected to jump host (1.42s)
"""

import logging
import re
import sys
from datetime import datetime

RESET = "\033[0m"

ANSI = {
    "bold": "\033[1m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "grey": "\033[90m",
    "light_red": "\033[91m",
    "light_green": "\033[92m",
    "light_yellow": "\033[93m",
    "light_blue": "\033[94m",
    "light_magenta": "\033[95m",
    "light_cyan": "\033[96m",
    "red_background": "\033[41m",
}

LEVEL_STYLES = {
    logging.DEBUG: ANSI["grey"],
    logging.INFO: ANSI["light_green"],
    logging.WARNING: ANSI["light_yellow"],
    logging.ERROR: ANSI["light_red"],
    logging.CRITICAL: ANSI["red_background"] + ANSI["white"] + ANSI["bold"],
}

# First matching logger-name prefix wins
COMPONENT_STYLES = (
    ("platform_spec.services.connection", ANSI["light_magenta"]),
    ("platform_spec.services.runner", ANSI["light_blue"]),
    ("platform_spec.retry", ANSI["yellow"]),
    ("platform_spec.providers", ANSI["cyan"]),
    ("platform_spec.config", ANSI["green"]),
)

# (pattern, style) pairs applied to the message text in order
HIGHLIGHTS = (
    (re.compile(r"^(\[\d{2}:\d{2}\.\d{2}\])"), ANSI["light_cyan"]),
    (re.compile(r"(\d+\.\d+s)\b"), ANSI["light_yellow"]),
    (re.compile(r"(\w[\w.\-]*@[\w.\-]+:\d+)"), ANSI["light_magenta"]),
)


class ColorfulFormatter(logging.Formatter):
    """Formats records as aligned, optionally colored columns."""

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def _paint(self, text: str, style: str) -> str:
        return f"{style}{text}{RESET}" if self.use_colors else text

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        component = record.name.removeprefix("platform_spec.")
        component_style = next(
            (style for prefix, style in COMPONENT_STYLES if record.name.startswith(prefix)),
            ANSI["white"],
        )
        bar = self._paint("|", ANSI["dim"])

        columns = [
            self._paint(f"{stamp}.{int(record.msecs):03d}", ANSI["dim"]),
            self._paint(f"{record.levelname:<8}", LEVEL_STYLES.get(record.levelno, ANSI["white"])),
            self._paint(f"{component:<20}", component_style),
            self._highlight(record.getMessage()),
        ]
        line = f" {bar} ".join(columns)

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    def _highlight(self, message: str) -> str:
        """Color elapsed stamps, durations and user@host:port targets."""
        if not self.use_colors:
            return message
        for pattern, style in HIGHLIGHTS:
            message = pattern.sub(f"{style}\\1{RESET}", message)
        return message


def configure_logging(level: str = "WARNING", use_colors: bool = True) -> None:
    """Send platform_spec logs to stderr through ColorfulFormatter.

    Calling it again only updates the level and colors; there is always
    exactly one handler.

    Args:
        level: Log level name; unknown names mean WARNING
        use_colors: Use ANSI colors (forced off when stderr is not a TTY)
    """
    use_colors = use_colors and sys.stderr.isatty()

    package_logger = logging.getLogger("platform_spec")
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not package_logger.handlers:
        package_logger.addHandler(logging.StreamHandler(sys.stderr))
        package_logger.propagate = False
    for handler in package_logger.handlers:
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))

    # asyncssh logs every channel open at INFO
    logging.getLogger("asyncssh").setLevel(logging.WARNING)
