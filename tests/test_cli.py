"""CLI tests: make-test-vector, validate, inspect, extract."""

import os

import pytest

from flacmeta import __version__
from flacmeta.cli import main
from flacmeta.reader import FlacReader


@pytest.fixture
def vector(tmp_path):
    out = str(tmp_path / "vector.flac")
    main(["make-test-vector", out])
    return out


def test_make_test_vector(capsys, vector):
    out = capsys.readouterr().out
    assert f"Wrote {vector}" in out
    assert "SHA-256" in out
    with FlacReader(vector) as r:
        assert len(r.list_blocks()) == 5
        assert r.streaminfo.sample_rate == 44100
        assert r.pictures[0].data == b"\xff\xd8\xff\xd9"


def test_make_test_vector_with_picture(tmp_path):
    img = tmp_path / "cover.png"
    img.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    out = str(tmp_path / "v.flac")
    main(["make-test-vector", out, "--picture", str(img), "--mime", "image/png"])
    with FlacReader(out) as r:
        pic = r.pictures[0]
    assert pic.mime == "image/png"
    assert pic.data == img.read_bytes()


def test_validate_ok(vector, capsys):
    capsys.readouterr()
    main(["validate", vector])
    assert "5 metadata blocks, framing OK." in capsys.readouterr().out


def test_validate_bad_file(tmp_path, capsys):
    bad = tmp_path / "bad.flac"
    bad.write_bytes(b"OggS" + b"\x00" * 40)
    with pytest.raises(SystemExit) as info:
        main(["validate", str(bad)])
    assert info.value.code == 1
    assert "bad signature" in capsys.readouterr().err


def test_inspect(vector, capsys):
    capsys.readouterr()
    main(["inspect", vector])
    out = capsys.readouterr().out
    assert "Signature  fLaC" in out
    assert "STREAMINFO" in out
    assert "VORBIS_COMMENT" in out
    assert 'comment[0]="TITLE=Test Vector"' in out
    assert 'Picture type: 3 ("Cover (front)")' in out
    assert "Picture extracted in" not in out
    assert "Frames start at byte" in out


def test_inspect_extract_dir(vector, tmp_path, capsys):
    out_dir = tmp_path / "pics"
    capsys.readouterr()
    main(["inspect", vector, "--extract-dir", str(out_dir)])
    assert "Picture extracted in" in capsys.readouterr().out
    files = os.listdir(out_dir)
    assert len(files) == 1
    assert files[0].endswith(".jpg")


def test_extract(vector, tmp_path, capsys):
    out_dir = tmp_path / "out"
    capsys.readouterr()
    main(["extract", vector, "--output-dir", str(out_dir)])
    out = capsys.readouterr().out
    assert "Cover (front)" in out
    (name,) = os.listdir(out_dir)
    assert str(out_dir / name) in out
    assert (out_dir / name).read_bytes() == b"\xff\xd8\xff\xd9"


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
    assert __version__ in capsys.readouterr().out
