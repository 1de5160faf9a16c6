from __future__ import annotations

from pathlib import Path

import pytest

from pairing_core.exceptions import FormatError, ResourceError
from pairing_core.records import FastqRecord, RecordReader, RecordWriter
from tests.fixtures import fastq_bytes, read_raw, write_raw

CODECS = ["none", "gzip", "zstd"]


@pytest.mark.parametrize("codec", CODECS)
def test_codec_is_sniffed_from_content(tmp_path: Path, codec: str) -> None:
    # name says nothing about the compression
    path = write_raw(tmp_path / "reads.dat", fastq_bytes(["a/1"]), codec)
    with RecordReader(path) as reader:
        assert reader.codec == codec
        assert reader.compressed == (codec != "none")


@pytest.mark.parametrize("codec", CODECS)
def test_offsets_point_at_record_starts(tmp_path: Path, codec: str) -> None:
    path = write_raw(tmp_path / "reads.fq", fastq_bytes(["a/1", "bb/1", "ccc/1"]), codec)
    with RecordReader(path) as reader:
        records = list(reader)
        assert [r.offset for r in records] == [0, 17, 35]
        assert reader.records_read == 3
        assert reader.position() == 54


@pytest.mark.parametrize("codec", CODECS)
def test_seek_back_rereads_same_record(tmp_path: Path, codec: str) -> None:
    reads = [("r1/1", "ACGT", "IIII"), ("r2/1", "GGCC", "JJJJ"), ("r3/1", "TTAA", "KKKK")]
    path = write_raw(tmp_path / "reads.fq", fastq_bytes(reads), codec)
    with RecordReader(path, stream="left") as reader:
        records = list(reader)
        for record in reversed(records):
            assert reader.read_record_at(record.offset) == record
        assert reader.read_record_at(records[1].offset).sequence == b"GGCC\n"


def test_record_lines_are_kept_verbatim(write_fastq) -> None:
    path = write_fastq("reads.fq", [("id/1 extra text", "ACGTN", "!!##")])
    with RecordReader(path) as reader:
        record = reader.read_record()
    assert record.lines() == (b"@id/1 extra text\n", b"ACGTN\n", b"+\n", b"!!##\n")


def test_end_of_stream(write_fastq) -> None:
    path = write_fastq("reads.fq", ["a/1"])
    with RecordReader(path) as reader:
        assert reader.read_record() is not None
        assert reader.read_record() is None
        assert reader.read_record() is None


def test_empty_file_has_no_records(tmp_path: Path) -> None:
    path = tmp_path / "empty.fq"
    path.write_bytes(b"")
    with RecordReader(path) as reader:
        assert list(reader) == []


@pytest.mark.parametrize("codec", CODECS)
def test_partial_record_is_a_format_error(tmp_path: Path, codec: str) -> None:
    data = fastq_bytes(["a/1"]) + b"@b/1\nACGT\n"
    path = write_raw(tmp_path / "broken.fq", data, codec)
    with RecordReader(path, stream="right") as reader:
        assert reader.read_record() is not None
        with pytest.raises(FormatError) as excinfo:
            reader.read_record()
    err = excinfo.value
    assert err.code == "format_error"
    assert err.context == {"stream": "right", "path": str(path), "record": 2, "offset": 17}
    assert "right file" in err.message


def test_missing_final_newline_is_still_a_record(tmp_path: Path) -> None:
    path = tmp_path / "reads.fq"
    path.write_bytes(b"@a/1\nACGT\n+\nIIII")
    with RecordReader(path) as reader:
        record = reader.read_record()
    assert record.quality == b"IIII"


def test_missing_input_is_a_resource_error(tmp_path: Path) -> None:
    with pytest.raises(ResourceError) as excinfo:
        RecordReader(tmp_path / "nope.fq", stream="left")
    assert excinfo.value.context["operation"] == "open"
    assert excinfo.value.context["stream"] == "left"


def test_corrupt_gzip_is_a_resource_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.fq.gz"
    path.write_bytes(b"\x1f\x8b\x08\x00" + bytes(6) + b"\xff" * 16)
    with pytest.raises(ResourceError) as excinfo:
        with RecordReader(path) as reader:
            reader.read_record()
    assert excinfo.value.context["operation"] == "read"


@pytest.mark.parametrize("codec", CODECS)
def test_writer_round_trip(tmp_path: Path, codec: str) -> None:
    out = tmp_path / "out.fq"
    record = FastqRecord(b"@x/1\n", b"ACGT\n", b"+\n", b"IIII")
    with RecordWriter(out, codec=codec) as writer:
        writer.write_record(record)
        writer.write_record(record.with_header(b"@x/2\n"))
        assert writer.records_written == 2
    assert read_raw(out) == b"@x/1\nACGT\n+\nIIII\n@x/2\nACGT\n+\nIIII\n"


def test_writer_into_missing_directory_is_a_resource_error(tmp_path: Path) -> None:
    with pytest.raises(ResourceError) as excinfo:
        RecordWriter(tmp_path / "missing" / "out.fq", stream="left_paired")
    assert excinfo.value.context == {
        "path": str(tmp_path / "missing" / "out.fq"),
        "stream": "left_paired",
        "operation": "create",
    }


def test_gzip_output_is_reproducible(tmp_path: Path) -> None:
    record = FastqRecord(b"@x/1\n", b"ACGT\n", b"+\n", b"IIII\n")
    blobs = []
    for _ in range(2):
        out = tmp_path / "out.fq.gz"
        with RecordWriter(out, codec="gzip") as writer:
            writer.write_record(record)
        blobs.append(out.read_bytes())
    assert blobs[0] == blobs[1]
