"""
Concrete drivers.

Each driver runs the shared pipeline from ChannelLogger and owns exactly
one destination: a file, a pair of terminal streams, the OS syslog, the
platform's native logging, or nothing at all.
"""

import logging
import smtplib
import sys
import threading
from email.message import EmailMessage
from pathlib import Path
from typing import Any, TextIO

try:
    import fcntl
except ImportError:  # not POSIX: the process-local lock still serializes writes
    fcntl = None

try:
    import syslog
except ImportError:  # not POSIX: SyslogLogger raises SinkError when used
    syslog = None

from chanlog.errors import SinkError
from chanlog.loggers.base import ChannelLogger
from chanlog.records import LogLevel


class FileLogger(ChannelLogger):
    """
    Appends one line per record to a file.

    Each write holds an exclusive lock for its own duration only, so
    several processes can append to the same path without interleaving.
    """

    default_format = "[{timestamp}] [{env}] {level}: {message} {context}"

    def __init__(self, path: str | Path = "logs/app.log", **kwargs: Any):
        super().__init__(**kwargs)
        self.path = Path(path)
        self._lock = threading.Lock()

    def write(self, level: LogLevel, line: str) -> None:
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as fh:
                    if fcntl is not None:
                        fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
                    try:
                        fh.write(line + "\n")
                        fh.flush()
                    finally:
                        if fcntl is not None:
                            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
        except OSError as exc:
            raise SinkError(f"Cannot write to log file '{self.path}': {exc}") from exc

    def __repr__(self) -> str:
        return f"FileLogger(channel={self.channel!r}, path='{self.path}', level={self.min_level.name})"


class ConsoleLogger(ChannelLogger):
    """
    Writes to terminal streams with ANSI color coding.
    ERROR+ goes to the error stream (stderr), everything else to stdout.
    """

    COLORS = {
        LogLevel.EMERGENCY: "\033[1;31m",   # bold red
        LogLevel.ALERT: "\033[1;31m",
        LogLevel.CRITICAL: "\033[1;31m",
        LogLevel.ERROR: "\033[0;31m",       # red
        LogLevel.WARNING: "\033[0;33m",     # yellow
        LogLevel.NOTICE: "\033[0;36m",      # cyan
        LogLevel.INFO: "\033[0;32m",        # green
        LogLevel.DEBUG: "\033[0;37m",       # white
    }
    RESET = "\033[0m"

    def __init__(
        self,
        colorize: bool = True,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.colorize = colorize
        self._stream = stream
        self._error_stream = error_stream

    @property
    def stream(self) -> TextIO:
        # Resolved per write so pytest's capsys and redirected stdout are honoured
        return self._stream if self._stream is not None else sys.stdout

    @property
    def error_stream(self) -> TextIO:
        return self._error_stream if self._error_stream is not None else sys.stderr

    def write(self, level: LogLevel, line: str) -> None:
        if self.colorize:
            line = f"{self.COLORS[level]}{line}{self.RESET}"
        stream = self.error_stream if level >= LogLevel.ERROR else self.stream
        try:
            print(line, file=stream, flush=True)
        except (OSError, ValueError) as exc:
            raise SinkError(f"Cannot write to console stream: {exc}") from exc


class SyslogLogger(ChannelLogger):
    """
    Sends each record to the OS syslog with a priority derived from its level.

    The facility may be given as a number or a name ("user", "local0", ...).
    """

    def __init__(self, ident: str = "python", facility: int | str = "user", **kwargs: Any):
        super().__init__(**kwargs)
        self.ident = ident
        self.facility = facility
        self._opened = False

    def _open(self) -> None:
        if syslog is None:
            raise SinkError("syslog is not available on this platform")
        syslog.openlog(self.ident, syslog.LOG_PID, resolve_facility(self.facility))
        self._opened = True

    def write(self, level: LogLevel, line: str) -> None:
        if not self._opened:
            self._open()
        try:
            syslog.syslog(level.syslog_priority, line)
        except (OSError, ValueError) as exc:
            raise SinkError(f"Cannot write to syslog: {exc}") from exc

    def close(self) -> None:
        if self._opened and syslog is not None:
            syslog.closelog()
            self._opened = False


class NativeLogger(ChannelLogger):
    """
    Hands each line to the platform's own logging, selected by message_type:

        0  system  stdlib logging, logger named by destination (default "chanlog.native"),
                   falling back to stderr when nothing handles it
        1  mail    e-mail to destination through the local SMTP server
        3  file    append to destination
        4  SAPI    the process's stderr

    Unknown message types fall back to 0.
    """

    SYSTEM, MAIL, FILE, SAPI = 0, 1, 3, 4
    MESSAGE_TYPES = (SYSTEM, MAIL, FILE, SAPI)

    def __init__(
        self,
        message_type: int = 0,
        destination: str | None = None,
        mailhost: str = "localhost",
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.message_type = message_type if message_type in self.MESSAGE_TYPES else self.SYSTEM
        self.destination = destination
        self.mailhost = mailhost

    def write(self, level: LogLevel, line: str) -> None:
        if self.message_type == self.SYSTEM:
            _bridge_logger(self.destination or "chanlog.native").log(_stdlib_level(level), line)
        elif self.message_type == self.MAIL:
            self._send_mail(level, line)
        elif self.message_type == self.FILE:
            self._append(line)
        else:
            try:
                print(line, file=sys.stderr, flush=True)
            except (OSError, ValueError) as exc:
                raise SinkError(f"Cannot write to stderr: {exc}") from exc

    def _append(self, line: str) -> None:
        if not self.destination:
            raise SinkError("errorlog message_type 3 requires a destination file")
        try:
            with open(self.destination, "a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as exc:
            raise SinkError(f"Cannot write to '{self.destination}': {exc}") from exc

    def _send_mail(self, level: LogLevel, line: str) -> None:
        if not self.destination:
            raise SinkError("errorlog message_type 1 requires a destination address")
        msg = EmailMessage()
        msg["Subject"] = f"[{self.channel}] {level.name}"
        msg["From"] = f"chanlog@{self.mailhost}"
        msg["To"] = self.destination
        msg.set_content(line)
        try:
            with smtplib.SMTP(self.mailhost) as smtp:
                smtp.send_message(msg)
        except (OSError, smtplib.SMTPException) as exc:
            raise SinkError(f"Cannot mail log record to '{self.destination}': {exc}") from exc


class NullLogger(ChannelLogger):
    """Discards everything. Never formats, never raises."""

    def log(self, level: Any, message: Any, context: Any = None, **fields: Any) -> None:
        return None

    def smart_log(self, message: Any, context: Any = None, **fields: Any) -> None:
        return None

    def write(self, level: LogLevel, line: str) -> None:
        return None


# ── Helpers ───────────────────────────────────────────────────────────

_FACILITY_CODES = {
    "kern": 0, "user": 1, "mail": 2, "daemon": 3, "auth": 4, "syslog": 5,
    "lpr": 6, "news": 7, "uucp": 8, "cron": 9,
    "local0": 16, "local1": 17, "local2": 18, "local3": 19,
    "local4": 20, "local5": 21, "local6": 22, "local7": 23,
}  # RFC 5424 facility numbers


def resolve_facility(value: int | str) -> int:
    """
    Convert a facility name or number to the syslog constant.

    Names are checked without the syslog module, so a bad name is caught
    at configuration time on every platform.

    Raises:
        ValueError: unknown facility name.
    """
    if isinstance(value, int):
        return value
    name = str(value).strip().lower()
    if name.startswith("log_"):
        name = name[4:]
    if name not in _FACILITY_CODES:
        raise ValueError(f"Unknown syslog facility '{value}'")
    default = _FACILITY_CODES[name] << 3
    if syslog is None:
        return default
    return getattr(syslog, f"LOG_{name.upper()}", default)


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is when the record is emitted."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self) -> TextIO:
        return sys.stderr


def _bridge_logger(name: str) -> logging.Logger:
    """
    Stdlib logger for the system message type.

    Records reaching it already passed the channel level, so an unset
    level becomes DEBUG. With no handler anywhere up its hierarchy it
    gets one on stderr.
    """
    logger = logging.getLogger(name)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.DEBUG)
    if not logger.hasHandlers():
        logger.addHandler(_StderrHandler())
    return logger


def _stdlib_level(level: LogLevel) -> int:
    """Map onto the stdlib logging scale (NOTICE → INFO, ALERT/EMERGENCY → CRITICAL)."""
    if level >= LogLevel.CRITICAL:
        return logging.CRITICAL
    if level >= LogLevel.ERROR:
        return logging.ERROR
    if level >= LogLevel.WARNING:
        return logging.WARNING
    if level >= LogLevel.INFO:
        return logging.INFO
    return logging.DEBUG
