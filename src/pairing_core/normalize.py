"""Canonical read identifiers.

Mates are recognised by a trailing ``/1``-``/2`` style marker: the separator is
one of ``/``, ``_`` or ``.`` and the marker one of ``1``, ``2``, ``f`` or ``r``.
The marker is dropped so both mates share the key ``<name><separator>``.

Identifiers without a recognised marker get their last byte replaced by
``/``. ``read1`` therefore becomes ``read/``, not ``read1/``. Both files go
through the same transform, so identical ids still meet.

NOTE: replacing instead of appending looks like an off-by-one; ``read1`` and
``read2`` collide on ``read/``. Changing it changes which reads pair up.
"""

from __future__ import annotations

import re

ID_ENCODING = "utf-8"
ID_ERRORS = "surrogateescape"

MATE_SEPARATORS = frozenset(b"/_.")
MATE_MARKERS = frozenset(b"12fr")
FALLBACK_SEPARATOR = b"/"

_FIELD_BREAK = re.compile(rb"[ \t]")


def decode_id(raw: bytes) -> str:
    return raw.decode(ID_ENCODING, ID_ERRORS)


def encode_id(canonical_id: str) -> bytes:
    return canonical_id.encode(ID_ENCODING, ID_ERRORS)


def split_line_terminator(line: bytes) -> tuple[bytes, bytes]:
    """Split ``line`` into its content and its ``\\n``/``\\r\\n`` terminator."""
    if line.endswith(b"\r\n"):
        return line[:-2], b"\r\n"
    if line.endswith(b"\n"):
        return line[:-1], b"\n"
    return line, b""


def normalize_id(header: bytes | str, *, split_at_whitespace: bool = False) -> str:
    """Derive the matching key for one header line.

    Args:
        header: Raw header line, with or without its line terminator.
        split_at_whitespace: Truncate the id at the first space or tab.

    Returns:
        A new string; nothing in it refers back to ``header``.
    """
    if isinstance(header, str):
        header = encode_id(header)
    content, _ = split_line_terminator(header)

    if split_at_whitespace:
        match = _FIELD_BREAK.search(content)
        if match is not None:
            content = content[: match.start()]

    # Marker checks and the fallback work on bytes; a multi-byte character
    # at the end loses only its last byte.
    if len(content) >= 2 and content[-2] in MATE_SEPARATORS:
        if content[-1] in MATE_MARKERS:
            return decode_id(content[:-1])
        return decode_id(content)
    return decode_id(content[:-1] + FALLBACK_SEPARATOR)
