import os

# Protocol line ending, as sent on the wire
CRLF: str = "\r\n"
DOT: str = "."
CR: str = "\r"
LF: str = "\n"

DEFAULT_ENCODING: str = "latin-1"

LINE_TERMINATORS: dict[str, str] = {
	"native": os.linesep,
	"lf": LF,
	"crlf": CRLF,
	"cr": CR,
}


def lineTerminator(name: str | None) -> str:
	"""Resolves a line terminator name (`native`, `lf`, `crlf`, `cr`) to
	the corresponding character sequence. `None` or an empty name
	resolves to the host platform's line ending."""
	if not name:
		return os.linesep
	key: str = name.strip().lower()
	if key not in LINE_TERMINATORS:
		raise ValueError(
			f"Unknown line terminator '{name}', expected one of: {', '.join(LINE_TERMINATORS)}"
		)
	return LINE_TERMINATORS[key]


# EOF
