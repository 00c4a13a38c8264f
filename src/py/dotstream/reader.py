import threading
from typing import Iterator, MutableSequence
from . import config
from .source import CharacterSource, PushbackSource
from .utils.io import CR, LF, DOT
from .utils.logging import LogLevel, debug, logged, warning

__doc__ = """
Decodes messages that are terminated by a line holding a single dot, as
sent by NNTP, POP3 and similar line-based protocols. On the wire, every
line ends with CRLF and lines that start with a dot have that dot doubled.

The reader removes the doubled dots, replaces each CRLF with the configured
line terminator, swallows the terminating line and then reports the end of
the stream, leaving the underlying source positioned right after the
message so that the session can go on.
"""


class DotTerminatedMessageReader:
	"""Reads a dot-terminated message from a character source. The source
	must be positioned at the start of the message body. Closing the
	reader drains the rest of the message but does not close the source."""

	__slots__ = ["source", "eol", "pending", "cursor", "atBeginning", "eof", "lock"]

	@classmethod
	def FromText(
		cls, text: str, eol: str | None = None
	) -> "DotTerminatedMessageReader":
		return cls(PushbackSource.FromText(text), eol)

	def __init__(self, source: CharacterSource, eol: str | None = None) -> None:
		eol = config.EOL if eol is None else eol
		if not eol:
			raise ValueError("Line terminator must not be empty")
		self.source: CharacterSource | None = source
		self.eol: str = eol
		# Decoded characters waiting to be returned, starting at `cursor`
		self.pending: str = ""
		self.cursor: int = 0
		self.atBeginning: bool = True
		self.eof: bool = False
		self.lock: threading.RLock = threading.RLock()

	@property
	def closed(self) -> bool:
		return self.source is None

	def readOne(self) -> str | None:
		"""Returns the next decoded character, or `None` once the end of the
		message has been reached. A single call may read several characters
		from the source."""
		with self.lock:
			if self.cursor < len(self.pending):
				char = self.pending[self.cursor]
				self.cursor += 1
				return char
			source = self.source
			if self.eof or source is None:
				return None
			ch = source.readChar()
			if ch is None:
				return self._truncated()
			if self.atBeginning:
				self.atBeginning = False
				if ch == DOT:
					ch = source.readChar()
					if ch == DOT:
						return DOT
					elif ch is None:
						return self._truncated()
					else:
						# Empty message, we skip the terminator's LF
						source.readChar()
						self.eof = True
						return None
			if ch == CR:
				ch = source.readChar()
				if ch != LF:
					if ch is None:
						self._truncated()
					else:
						source.unreadChar(ch)
					return CR
				ch = source.readChar()
				if ch == DOT:
					ch = source.readChar()
					if ch == DOT:
						return self._stage(self.eol + DOT)
					elif ch is None:
						self._truncated()
					else:
						# End of message, we skip the terminator's LF
						source.readChar()
						self.eof = True
				elif ch is None:
					self._truncated()
				else:
					source.unreadChar(ch)
				return self._stage(self.eol)
			return ch

	def readInto(
		self,
		buffer: MutableSequence[str],
		offset: int = 0,
		length: int | None = None,
	) -> int | None:
		"""Reads up to `length` decoded characters into `buffer` starting at
		`offset`, returning how many were read, or `None` when the message
		was already fully read."""
		with self.lock:
			if length is not None and length < 1:
				return 0
			if offset < 0 or offset > len(buffer):
				raise IndexError(
					f"Offset {offset} is outside of a buffer of {len(buffer)}"
				)
			n: int = len(buffer) - offset if length is None else length
			if n < 1:
				return 0
			if offset + n > len(buffer):
				raise IndexError(
					f"Cannot read {n} characters at offset {offset} into a buffer of {len(buffer)}"
				)
			ch = self.readOne()
			if ch is None:
				return None
			count: int = 0
			while ch is not None:
				buffer[offset + count] = ch
				count += 1
				if count >= n:
					break
				ch = self.readOne()
			return count

	def read(self, size: int = -1) -> str:
		"""Returns up to `size` decoded characters, or the rest of the
		message when `size` is negative. Returns an empty string at the end
		of the message."""
		with self.lock:
			chars: list[str] = []
			while size < 0 or len(chars) < size:
				ch = self.readOne()
				if ch is None:
					break
				chars.append(ch)
			return "".join(chars)

	def readline(self) -> str:
		"""Returns the next decoded line, including its line terminator
		unless it is the last line of a truncated message."""
		with self.lock:
			chars: list[str] = []
			eol: str = self.eol
			n: int = len(eol)
			while (ch := self.readOne()) is not None:
				chars.append(ch)
				if ch == eol[-1] and len(chars) >= n and "".join(chars[-n:]) == eol:
					break
			return "".join(chars)

	def ready(self) -> bool:
		with self.lock:
			if self.cursor < len(self.pending):
				return True
			elif self.source is None:
				return False
			else:
				return self.source.ready()

	def close(self) -> None:
		"""Reads whatever remains of the message so that the source is left
		right after the terminator line. Any error raised by the source while
		doing so is propagated."""
		with self.lock:
			if self.source is None:
				return None
			if not self.eof:
				drained: int = 0
				while self.readOne() is not None:
					drained += 1
				if drained and logged(LogLevel.Debug):
					debug("Discarded unread message remainder", count=drained)
			self.eof = True
			self.atBeginning = False
			self.pending = ""
			self.cursor = 0
			self.source = None

	def _stage(self, text: str) -> str:
		self.pending = text
		self.cursor = 1
		return text[0]

	def _truncated(self) -> None:
		self.eof = True
		if logged(LogLevel.Warning):
			warning("Source ended before the message terminator")
		return None

	def __iter__(self) -> Iterator[str]:
		return self

	def __next__(self) -> str:
		line = self.readline()
		if not line:
			raise StopIteration
		return line

	def __enter__(self) -> "DotTerminatedMessageReader":
		return self

	def __exit__(self, type: object, value: object, traceback: object) -> None:
		self.close()

	def __str__(self) -> str:
		return f"DotTerminatedMessageReader(eol={self.eol!r}, eof={self.eof}, closed={self.closed})"


# EOF
