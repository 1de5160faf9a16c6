"""Pair reads from two FASTQ files by canonical read id."""

__version__ = "1.0.0"

from pairing_core.config import PairingConfig, load_config
from pairing_core.counters import PairCounters
from pairing_core.exceptions import (
    ConfigValidationError,
    FormatError,
    PairingError,
    ResourceError,
    YamlParseError,
)
from pairing_core.index import HashIndex, IndexEntry, id_hash
from pairing_core.normalize import normalize_id
from pairing_core.pairing import PairingResult, pair_files
from pairing_core.records import FastqRecord, RecordReader, RecordWriter

__all__ = [
    "__version__",
    "PairingConfig",
    "load_config",
    "PairCounters",
    "PairingError",
    "ResourceError",
    "FormatError",
    "ConfigValidationError",
    "YamlParseError",
    "HashIndex",
    "IndexEntry",
    "id_hash",
    "normalize_id",
    "PairingResult",
    "pair_files",
    "FastqRecord",
    "RecordReader",
    "RecordWriter",
]
