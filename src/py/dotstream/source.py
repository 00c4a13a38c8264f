import codecs
import io
import select
import socket
from abc import ABC, abstractmethod
from typing import ClassVar, Protocol
from mypy_extensions import mypyc_attr
from . import config

__doc__ = """
Character sources the message reader pulls from. A source hands out one
character at a time and accepts exactly one character back, which is all
the lookahead the dot-terminated framing needs.
"""


class PushbackError(OSError):
	"""Raised when a character is pushed back while another one is already
	waiting to be read."""


class TextStream(Protocol):
	def read(self, size: int = -1, /) -> str: ...


class BinaryStream(Protocol):
	def read(self, size: int = -1, /) -> bytes | None: ...

	def fileno(self) -> int: ...


class DecodingStream:
	"""Decodes a binary stream into characters, keeping the decoded
	characters that have not been read yet so that `ready()` can tell them
	apart from data still waiting on the file descriptor."""

	__slots__ = ["raw", "decoder", "chars", "offset", "eof"]

	CHUNK: ClassVar[int] = 4096

	def __init__(self, raw: BinaryStream, encoding: str | None = None) -> None:
		self.raw: BinaryStream = raw
		self.decoder: codecs.IncrementalDecoder = codecs.getincrementaldecoder(
			encoding or config.ENCODING
		)()
		self.chars: str = ""
		self.offset: int = 0
		self.eof: bool = False

	def read(self, size: int = -1, /) -> str:
		if size == 0:
			return ""
		elif size < 0:
			parts: list[str] = []
			while chunk := self.read(self.CHUNK):
				parts.append(chunk)
			return "".join(parts)
		while self.offset >= len(self.chars) and not self.eof:
			# `read1` returns what is available instead of waiting for a full chunk
			read1 = getattr(self.raw, "read1", None)
			data: bytes | None = (
				read1(self.CHUNK) if read1 else self.raw.read(self.CHUNK)
			)
			if data is None:
				raise BlockingIOError("No data available on non-blocking stream")
			self.eof = not data
			self.chars = self.decoder.decode(data, final=self.eof)
			self.offset = 0
		end: int = min(len(self.chars), self.offset + size)
		res: str = self.chars[self.offset : end]
		self.offset = end
		return res

	def ready(self) -> bool:
		if self.offset < len(self.chars) or self.eof:
			return True
		try:
			fd: int = self.raw.fileno()
		except (AttributeError, io.UnsupportedOperation):
			return True
		readable, _, _ = select.select([fd], [], [], 0)
		return bool(readable)

	def __str__(self) -> str:
		return f"DecodingStream({self.raw}, pending={len(self.chars) - self.offset})"


@mypyc_attr(allow_interpreted_subclasses=True)
class CharacterSource(ABC):
	"""Abstract character source with a single character of pushback."""

	@abstractmethod
	def readChar(self) -> str | None:
		"""Returns the next character, or `None` at the end of the stream."""

	@abstractmethod
	def unreadChar(self, char: str) -> None:
		"""Pushes back `char` so that it is returned by the next `readChar`."""

	def ready(self) -> bool:
		"""Tells if `readChar` can be called without blocking."""
		return True


class PushbackSource(CharacterSource):
	"""Wraps a text stream (anything with a `read(size)` returning `str`)
	as a character source. The stream must not translate newlines, as the
	reader needs to see the CRLF sequences as they were sent."""

	__slots__ = ["stream", "pushed"]

	@classmethod
	def FromText(cls, text: str) -> "PushbackSource":
		return cls(io.StringIO(text, newline=""))

	@classmethod
	def FromSocket(
		cls, sock: socket.socket, encoding: str | None = None
	) -> "PushbackSource":
		"""Creates a source reading from the given connected socket. The
		socket stays owned by the caller."""
		return cls(DecodingStream(sock.makefile("rb", buffering=0), encoding))

	def __init__(self, stream: TextStream) -> None:
		self.stream: TextStream = stream
		self.pushed: str | None = None

	def readChar(self) -> str | None:
		if self.pushed is not None:
			char, self.pushed = self.pushed, None
			return char
		return self.stream.read(1) or None

	def unreadChar(self, char: str) -> None:
		if len(char) != 1:
			raise ValueError(f"Can only push back a single character, got: {char!r}")
		if self.pushed is not None:
			raise PushbackError("Pushback buffer overflow")
		self.pushed = char

	def ready(self) -> bool:
		if self.pushed is not None:
			return True
		check = getattr(self.stream, "ready", None)
		if callable(check):
			return bool(check())
		try:
			fd: int = self.stream.fileno()  # type: ignore[attr-defined]
		except (AttributeError, io.UnsupportedOperation):
			# In-memory streams never block
			return True
		# NOTE: `select` does not see characters buffered by a text wrapper,
		# streams that buffer should provide `ready()`, as `DecodingStream` does.
		readable, _, _ = select.select([fd], [], [], 0)
		return bool(readable)

	def __str__(self) -> str:
		return f"PushbackSource({self.stream}, pushed={self.pushed!r})"


# EOF
