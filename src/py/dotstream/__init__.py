from .reader import DotTerminatedMessageReader  # NOQA: F401
from .source import CharacterSource, PushbackSource, PushbackError  # NOQA: F401
from .utils.io import lineTerminator  # NOQA: F401

__version__ = "1.0.0"

# EOF
