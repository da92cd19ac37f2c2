"""Per-path classification: extension, exclude match, size and binary check."""

from __future__ import annotations

import posixpath
import re

from commitguard.config import ReviewConfig
from commitguard.logging import get_logger
from commitguard.selection.models import FileClassification
from commitguard.selection.sources import HEAD_BYTES, ContentSource

__all__ = [
    "FileClassifier",
    "BINARY_SIGNATURES",
    "KNOWN_BINARY_EXTENSIONS",
    "extension_of",
    "looks_binary",
]

logger = get_logger(__name__)

#: Magic numbers at offset 0 that mark content as binary
BINARY_SIGNATURES: tuple[tuple[str, bytes], ...] = (
    ("zip", b"PK\x03\x04"),
    ("png", b"\x89PNG"),
    ("elf", b"\x7fELF"),
    ("jpeg", b"\xff\xd8\xff"),
    ("pdf", b"%PDF"),
    ("gif", b"GIF8"),
    ("gzip", b"\x1f\x8b"),
    ("matroska", b"\x1a\x45\xdf\xa3"),
    ("wasm", b"\x00asm"),
)

#: Extensions whose files are binary whatever their bytes say
KNOWN_BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        "png", "jpg", "jpeg", "gif", "bmp", "ico", "webp", "pdf",
        "zip", "gz", "tgz", "tar", "jar", "war", "7z",
        "exe", "dll", "so", "dylib", "o", "a", "class", "pyc", "wasm",
        "woff", "woff2", "ttf", "otf", "mp3", "mp4", "wav", "webm", "mkv",
    }
)

# Control bytes that still occur in ordinary text
_TEXT_CONTROL_BYTES = frozenset(b"\t\n\r\f\b\x1b")

_BINARY_RATIO = 0.25


def extension_of(path: str) -> str:
    """Lower-cased text after the last dot of the basename, or "".

    Example:
        >>> extension_of("src/App.TSX")
        'tsx'
        >>> extension_of("Makefile")
        ''
    """
    name = posixpath.basename(path)
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def looks_binary(head: bytes) -> bool:
    """Decide whether ``head`` belongs to binary content.

    Binary when it starts with a known magic number, or when more than a
    quarter of the bytes are control characters other than common whitespace.
    Bytes at or above 0x80 are not counted, so UTF-8 text stays text. Empty
    content is text.
    """
    if not head:
        return False
    for _name, signature in BINARY_SIGNATURES:
        if head.startswith(signature):
            return True
    control = sum(1 for byte in head if byte < 0x20 and byte not in _TEXT_CONTROL_BYTES)
    control += head.count(0x7F)
    return control / len(head) > _BINARY_RATIO


class FileClassifier:
    """Classify paths against a configuration at one snapshot.

    Results are memoized per path, so one classifier should live for one hook
    run only.

    Example:
        ```python
        classifier = FileClassifier(config, IndexSource(repo))
        info = classifier.classify("src/app.py")
        if not info.is_binary and not info.matches_exclude:
            ...
        ```
    """

    def __init__(self, config: ReviewConfig, source: ContentSource) -> None:
        self._config = config
        self._source = source
        self._patterns = tuple(re.compile(p) for p in config.exclude_patterns)
        self._cache: dict[str, FileClassification] = {}

    @property
    def config(self) -> ReviewConfig:
        return self._config

    @property
    def source(self) -> ContentSource:
        return self._source

    def is_allowed_extension(self, path: str) -> bool:
        return extension_of(path) in self._config.code_extensions

    def matches_exclude(self, path: str) -> bool:
        """True if any exclude pattern is found in the path or its basename."""
        candidates = (path, posixpath.basename(path))
        return any(
            pattern.search(candidate)
            for pattern in self._patterns
            for candidate in candidates
        )

    def classify(self, path: str) -> FileClassification:
        """Classify ``path`` at this classifier's snapshot.

        Content larger than ``max_file_size`` is never read; its
        ``is_binary`` is None.

        Raises:
            ClassificationError: If the content cannot be read.
        """
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        size = self._source.size(path)
        is_binary: bool | None = None
        if size <= self._config.max_file_size:
            is_binary = looks_binary(self._source.read_head(path, HEAD_BYTES))
        classification = FileClassification(
            path=path,
            extension=extension_of(path),
            size=size,
            is_binary=is_binary,
            matches_exclude=self.matches_exclude(path),
        )
        self._cache[path] = classification
        logger.debug(
            "file_classified",
            path=path,
            size=size,
            is_binary=classification.is_binary,
        )
        return classification
