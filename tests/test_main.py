import pytest

from bencodec.__main__ import main
from bencodec.bencode import Encoder
from bencodec.value import Value


@pytest.fixture
def torrent_file(tmp_path):
    metainfo = {
        b"announce": b"http://test.com/announce",
        b"info": {
            b"name": b"test.txt",
            b"length": 100,
            b"piece length": 16384,
            b"pieces": b"\x01" * 20,
        },
    }
    path = tmp_path / "test.torrent"
    path.write_bytes(Encoder().encode(Value.from_python(metainfo)))
    return str(path)


def test_show(tmp_path, capsys):
    """Test that every top-level value is printed."""
    path = tmp_path / "values.bin"
    path.write_bytes(b"d1:ali1ee1:b2:\xff\xfee4:spam")

    assert main(["show", str(path)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ['{"a": [1], "b": [2 bytes]}', '"spam"']


def test_info(torrent_file, capsys):
    """Test the torrent summary."""
    assert main(["info", torrent_file]) == 0

    out = capsys.readouterr().out
    assert "Tracker URL: http://test.com/announce" in out
    assert "Length: 100" in out
    assert "01" * 20 in out


def test_show_reports_parse_errors(tmp_path, capsys):
    """Test that malformed input prints the error kind and exits 1."""
    path = tmp_path / "bad.bin"
    path.write_bytes(b"i032e")

    assert main(["show", str(path)]) == 1

    err = capsys.readouterr().err
    assert err.startswith("error: LeadingZeroInInteger")


def test_missing_file(tmp_path, capsys):
    """Test that an unreadable file is reported, not raised."""
    assert main(["show", str(tmp_path / "nope")]) == 1
    assert "error:" in capsys.readouterr().err


def test_command_required():
    """Test that a subcommand must be given."""
    with pytest.raises(SystemExit):
        main([])
