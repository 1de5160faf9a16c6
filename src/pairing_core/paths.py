from __future__ import annotations

import dataclasses
from pathlib import Path

from pairing_core.exceptions import ResourceError
from pairing_core.utils.io import CODEC_NONE, CODEC_SUFFIXES

DEFAULT_EXTENSION = ".fastq"

# Longest first so ".fastq.gz" wins over ".fastq"
KNOWN_SUFFIXES: tuple[tuple[str, str], ...] = (
    (".fastq.gz", ".fastq"),
    (".fastq.zst", ".fastq"),
    (".fq.gz", ".fq"),
    (".fq.zst", ".fq"),
    (".fastq", ".fastq"),
    (".fq", ".fq"),
)

PAIRED_TAG = ".paired"
SINGLE_TAG = ".single"


@dataclasses.dataclass(frozen=True)
class OutputPaths:
    left_paired: Path
    right_paired: Path
    left_single: Path
    right_single: Path

    def as_dict(self) -> dict[str, str]:
        return {field.name: str(getattr(self, field.name)) for field in dataclasses.fields(self)}

    def all(self) -> tuple[Path, Path, Path, Path]:
        return (self.left_paired, self.right_paired, self.left_single, self.right_single)


def split_fastq_name(name: str) -> tuple[str, str]:
    """Split a file name into its stem and FASTQ extension.

    >>> split_fastq_name("sample_R1.fq.gz")
    ('sample_R1', '.fq')
    >>> split_fastq_name("reads.txt")
    ('reads.txt', '.fastq')
    """
    for suffix, extension in KNOWN_SUFFIXES:
        if len(name) > len(suffix) and name.endswith(suffix):
            return name[: -len(suffix)], extension
    return name, DEFAULT_EXTENSION


def output_codec(left_codec: str, right_codec: str) -> str:
    """Outputs are compressed when either input is; the left input's codec wins."""
    if left_codec != CODEC_NONE:
        return left_codec
    return right_codec


def _derive(path: Path, tag: str, codec: str, output_dir: Path | None) -> Path:
    stem, extension = split_fastq_name(path.name)
    parent = output_dir if output_dir is not None else path.parent
    return parent / f"{stem}{tag}{extension}{CODEC_SUFFIXES[codec]}"


def derive_output_paths(
    left: Path,
    right: Path,
    *,
    codec: str = CODEC_NONE,
    output_dir: Path | None = None,
) -> OutputPaths:
    """Build the four output paths from the two input names.

    Raises:
        ResourceError: Two outputs share a path, or an output would replace
            one of the inputs.
    """
    outputs = OutputPaths(
        left_paired=_derive(left, PAIRED_TAG, codec, output_dir),
        right_paired=_derive(right, PAIRED_TAG, codec, output_dir),
        left_single=_derive(left, SINGLE_TAG, codec, output_dir),
        right_single=_derive(right, SINGLE_TAG, codec, output_dir),
    )
    resolved = [p.resolve() for p in outputs.all()]
    if len(set(resolved)) != len(resolved):
        raise ResourceError(
            f"Output file names collide for inputs {left} and {right}; use distinct input names",
            context={"operation": "derive_outputs", "outputs": outputs.as_dict()},
        )
    inputs = {left.resolve(), right.resolve()}
    for path, resolved_path in zip(outputs.all(), resolved):
        if resolved_path in inputs:
            raise ResourceError(
                f"Output file {path} would overwrite an input file",
                context={"operation": "derive_outputs", "path": str(path)},
            )
    return outputs
