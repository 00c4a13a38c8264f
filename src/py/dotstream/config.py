from os import getenv
from .utils.io import DEFAULT_ENCODING, lineTerminator

# Line terminator emitted in place of every decoded CRLF, one of
# `native`, `lf`, `crlf` or `cr`.
EOL: str = lineTerminator(getenv("DOTSTREAM_EOL", "native"))

# Used when wrapping sockets and by the command line. Latin-1 maps every
# byte to one character, which keeps the decoding byte-transparent.
ENCODING: str = getenv("DOTSTREAM_ENCODING", DEFAULT_ENCODING)

LOG_LEVEL: str = getenv("DOTSTREAM_LOG_LEVEL", "Warning")

# EOF
