import argparse
import io
import sys
from typing import TextIO
from . import config
from .reader import DotTerminatedMessageReader
from .source import PushbackSource
from .utils.io import LINE_TERMINATORS, lineTerminator
from .utils.logging import error, info


def decode(
	source: PushbackSource, output: TextIO, *, eol: str, all: bool = False
) -> int:
	"""Decodes one message (or all of them) from `source` into `output`,
	returning the number of messages decoded."""
	count: int = 0
	while True:
		with DotTerminatedMessageReader(source, eol) as reader:
			for line in reader:
				output.write(line)
		count += 1
		if not all:
			break
		# We stop when nothing follows the last terminator
		if (char := source.readChar()) is None:
			break
		source.unreadChar(char)
	return count


def main(
	args: list[str] | None = None,
	*,
	stdin: io.BufferedIOBase | None = None,
	stdout: TextIO | None = None,
) -> int:
	parser = argparse.ArgumentParser(
		prog="dotstream",
		description="Decodes dot-terminated messages (NNTP, POP3) from a file or stdin",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"-e",
		"--eol",
		action="store",
		dest="eol",
		choices=list(LINE_TERMINATORS),
		help="Line terminator written in place of CRLF",
		default="native",
	)
	parser.add_argument(
		"-E",
		"--encoding",
		action="store",
		dest="encoding",
		help="Encoding of the input and output",
		default=config.ENCODING,
	)
	parser.add_argument(
		"-a",
		"--all",
		action="store_true",
		dest="all",
		help="Decodes consecutive messages until the input is exhausted",
	)
	parser.add_argument(
		"path",
		metavar="PATH",
		nargs="?",
		help="The file to decode, stdin when omitted",
	)
	options = parser.parse_args(args=args)

	eol: str = lineTerminator(options.eol)
	# Both wrappers are detached once done, so that the standard streams
	# stay open.
	output: io.TextIOWrapper | TextIO = stdout or io.TextIOWrapper(
		sys.stdout.buffer, encoding=options.encoding, newline=""
	)
	stream: io.TextIOWrapper | None = None
	try:
		if options.path:
			with open(options.path, "r", encoding=options.encoding, newline="") as f:
				count = decode(PushbackSource(f), output, eol=eol, all=options.all)
		else:
			stream = io.TextIOWrapper(
				stdin or sys.stdin.buffer, encoding=options.encoding, newline=""
			)
			count = decode(PushbackSource(stream), output, eol=eol, all=options.all)
	except (OSError, UnicodeError) as e:
		error(
			f"Could not decode message: {e}",
			e.__class__.__name__,
			path=options.path or "-",
		)
		return 1
	finally:
		output.flush()
		if stdout is None and isinstance(output, io.TextIOWrapper):
			output.detach()
		if stream is not None:
			stream.detach()
	info("Decoded messages", count=count)
	return 0


if __name__ == "__main__":
	sys.exit(main(sys.argv[1:]))
# EOF
