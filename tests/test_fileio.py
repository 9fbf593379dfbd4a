import io
import os

import pytest

from flifkit.fileio import EOS, BlobIO, BlobReader, FileIO


# FileIO


def test_fileio_reads_bytes_then_eos():
    fio = FileIO(io.BytesIO(b"FLIF"), "mem")
    assert [fio.getc() for _ in range(4)] == list(b"FLIF")
    assert not fio.eof
    assert fio.getc() == EOS
    assert fio.eof


def test_fileio_gets_stops_at_newline_and_limit():
    fio = FileIO(io.BytesIO(b"P6\n640 480\n"), "mem")
    assert fio.gets(100) == b"P6\n"
    assert fio.gets(4) == b"640"
    assert fio.gets(100) == b" 480\n"
    assert fio.gets(100) is None
    assert fio.eof


def test_fileio_seek_clears_eof_and_tell(tmp_path):
    path = tmp_path / "a.bin"
    path.write_bytes(b"FLIF")
    with FileIO(open(path, "rb"), str(path)) as fio:
        fio.seek(0, os.SEEK_END)
        assert fio.getc() == EOS
        assert fio.eof
        fio.seek(-1, os.SEEK_END)
        assert not fio.eof
        assert fio.tell() == 3
        assert fio.getc() == ord("F")


def test_fileio_write_round_trip(tmp_path):
    path = tmp_path / "out.bin"
    with FileIO(open(path, "wb"), str(path)) as fio:
        assert fio.puts("FLI") == 3
        assert fio.putc(ord("F")) == ord("F")
        fio.flush()
    assert path.read_bytes() == b"FLIF"


def test_fileio_closed_stream_raises():
    fio = FileIO(io.BytesIO(b"x"), "mem")
    fio.close()
    fio.close()
    with pytest.raises(ValueError):
        fio.getc()


def test_fileio_keeps_name():
    fio = FileIO(io.BytesIO(), "from standard input")
    assert fio.name == "from standard input"


# BlobReader


def test_blobreader_getc_and_eof():
    reader = BlobReader(b"FLIF")
    assert bytes(reader.getc() for _ in range(4)) == b"FLIF"
    assert reader.eof
    assert reader.getc() == EOS
    assert reader.name == "BlobReader"


def test_blobreader_gets_full_and_partial():
    reader = BlobReader(b"FLIF")
    assert reader.gets(3) == b"FL"
    assert reader.gets(5) is None
    assert reader.tell() == 4


def test_blobreader_seek_modes():
    reader = BlobReader(b"FLIF")
    reader.seek(2, os.SEEK_SET)
    assert reader.tell() == 2
    reader.seek(1, os.SEEK_CUR)
    assert reader.tell() == 3
    reader.seek(-4, os.SEEK_END)
    assert reader.tell() == 0


@pytest.mark.parametrize("offset,whence", [(-1, os.SEEK_SET), (0, 99)])
def test_blobreader_bad_seek(offset, whence):
    with pytest.raises(ValueError):
        BlobReader(b"FLIF").seek(offset, whence)


def test_gets_rejects_zero_size():
    with pytest.raises(ValueError):
        BlobReader(b"FLIF").gets(0)


# BlobIO


def test_blobio_write_read_round_trip():
    blob = BlobIO()
    blob.puts(b"FLIF")
    blob.putc(0x31)
    assert blob.tell() == 5
    blob.seek(0)
    assert blob.gets(6) == b"FLIF1"
    assert blob.eof
    assert blob.getc() == EOS


def test_blobio_release_resets():
    blob = BlobIO()
    blob.puts("FLIF")
    assert blob.release() == b"FLIF"
    assert blob.tell() == 0
    assert blob.release() == b""
    assert blob.name == "BlobIO"


def test_blobio_overwrite_in_place():
    blob = BlobIO()
    blob.puts(b"FLIF")
    blob.seek(1)
    blob.putc(ord("X"))
    blob.flush()
    assert blob.release() == b"FXIF"


def test_blobio_seek_past_end_fills_zeroes():
    blob = BlobIO()
    blob.putc(ord("F"))
    blob.seek(2, os.SEEK_CUR)
    blob.putc(ord("F"))
    data = blob.release()
    assert data[0] == data[-1] == ord("F")
    assert set(data[1:-1]) == {0}
    assert len(data) == 4


def test_blobio_seek_end_and_large_write():
    blob = BlobIO()
    payload = bytes(range(256)) * 20
    blob.puts(payload)
    blob.seek(-256, os.SEEK_END)
    assert blob.gets(257) == bytes(range(256))
    assert blob.release() == payload


def test_blobio_bad_seek():
    with pytest.raises(ValueError):
        BlobIO().seek(-1, os.SEEK_CUR)