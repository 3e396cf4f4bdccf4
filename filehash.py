"""Hash files and binary streams with QuickXorHash.

Reading the source is the only step that can fail. compute() keeps the
outcome of that step visible in a HashResult; generate() turns it into a
digest, either raising SourceReadError (strict) or returning the all-zero
ZERO_DIGEST sentinel (compatible, the default).
"""
import logging
import os
from dataclasses import dataclass

from quickxorhash import QuickXorHash

logger = logging.getLogger(__name__)

ZERO_DIGEST = bytes(QuickXorHash.BLOCK_LEN)


class QuickXorHashError(Exception):
    """Base class for errors raised by this package."""


class SourceReadError(QuickXorHashError):
    """The content of a source could not be read."""

    def __init__(self, source, cause):
        self.source = source
        self.cause = cause
        super().__init__(f"Cannot read {source!r}: {cause}")


@dataclass(frozen=True)
class HashResult:
    """Outcome of hashing one source: a digest or the read error."""

    source: object
    digest: bytes | None = None
    error: Exception | None = None
    length: int | None = None

    @property
    def ok(self):
        return self.error is None

    def unwrap(self):
        """Return the digest or raise SourceReadError for a failed read."""
        if self.error is not None:
            raise SourceReadError(self.source, self.error) from self.error
        return self.digest


def _is_stream(source):
    return callable(getattr(source, "read", None))


def read_source(source):
    """Return the full byte content of a path or readable binary stream.

    Paths are opened and closed here. Streams are read to EOF and left open.
    OSError propagates, as does the ValueError raised for a closed stream
    or a path containing a NUL byte. Unsupported sources raise TypeError.
    """
    if _is_stream(source):
        data = source.read()
        if isinstance(data, str):
            raise TypeError("Stream must be opened in binary mode")
        if data is None:
            raise TypeError("Non-blocking streams are not supported")
        return data
    if isinstance(source, (str, bytes, os.PathLike)):
        with open(source, "rb") as f:
            return f.read()
    raise TypeError(f"Unsupported source type: {type(source).__name__}")


def compute(source):
    """Hash source and report the outcome without raising on read failure."""
    try:
        data = read_source(source)
    except (OSError, ValueError) as e:
        return HashResult(source, error=e)
    logger.debug("Hashing %r (%d bytes)", source, len(data))
    return HashResult(source, digest=QuickXorHash.digest(data), length=len(data))


def generate(source, strict=False):
    """Return the 20-byte QuickXorHash of source.

    If the source cannot be read, raise SourceReadError when strict is set,
    otherwise log a warning and return ZERO_DIGEST.
    """
    result = compute(source)
    if result.ok:
        return result.digest
    if strict:
        return result.unwrap()
    logger.warning("Failed to read %r, using zero digest: %s", source, result.error)
    return ZERO_DIGEST
