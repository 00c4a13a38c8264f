import sys
import time
from enum import Enum
from typing import NamedTuple, Any, TypeAlias
from contextvars import ContextVar
from .term import Term
from .. import config

ERR = sys.stderr

TLogValue: TypeAlias = bool | int | float | str | None

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="dotstream")


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30  # Unexpected but handled condition
	Error = 40  # A managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
}


def logLevel(name: str | None, default: LogLevel = LogLevel.Warning) -> LogLevel:
	"""Returns the log level with the given (case insensitive) name."""
	if not name:
		return default
	for level in LogLevel:
		if level.name.lower() == name.strip().lower():
			return level
	return default


LEVEL: LogLevel = logLevel(config.LOG_LEVEL)


class LogEntry(NamedTuple):
	origin: str
	time: float
	level: LogLevel = LogLevel.Info
	message: str | None = None
	value: TLogValue = None
	context: dict[str, TLogValue] | None = None


def setLevel(level: LogLevel | str) -> LogLevel:
	"""Sets the minimum level of entries that are written out, returning
	the previous one."""
	global LEVEL
	previous = LEVEL
	LEVEL = level if isinstance(level, LogLevel) else logLevel(level, LEVEL)
	return previous


def logged(level: LogLevel) -> bool:
	"""Tells if entries of the given level are currently written out. This
	is used to guard against building entries when not necessary."""
	return level.value >= LEVEL.value


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value or not value.isprintable() else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if not logged(entry.level):
		return entry
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	code: str = "" if entry.value is None else f" [{entry.value}]"
	ERR.write(
		f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET}{code} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
	)
	ERR.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	at: float | None = None,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	value: TLogValue = None,
	context: dict[str, TLogValue],
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time() if at is None else at,
		level=level,
		message=message,
		value=value,
		context=context,
	)


def debug(
	message: str,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Debug,
			origin=origin,
			at=at,
			context=context,
		)
	)


def info(
	message: str,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(entry(message=message, origin=origin, at=at, context=context))


def warning(
	message: str,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Warning,
			origin=origin,
			at=at,
			context=context,
		)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	at: float | None = None,
	**context: TLogValue,
) -> LogEntry:
	return send(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			origin=origin,
			at=at,
			context=context,
		)
	)


# EOF
