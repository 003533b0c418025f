import hashlib

import pytest

from bencodec.bencode import Encoder
from bencodec.errors import BencodeError, CustomMessage
from bencodec.torrent_info import FileInfo, TorrentInfo
from bencodec.value import Value


def bencode(obj) -> bytes:
    return Encoder().encode(Value.from_python(obj))


class TestTorrentInfo:
    """Test suite for the TorrentInfo class."""

    @pytest.fixture
    def sample_metainfo(self):
        """Create a sample torrent metainfo dict."""
        return {
            b"announce": b"http://tracker.example.com:8080/announce",
            b"created by": b"mktorrent",
            b"creation date": 1700000000,
            b"info": {
                b"name": b"test.txt",
                b"length": 1024,
                b"piece length": 16384,
                b"pieces": b"12345678901234567890" * 3,  # 3 pieces, 20 bytes each
                b"x-unknown": b"kept in the info hash",
            },
        }

    @pytest.fixture
    def multi_file_metainfo(self):
        """Create a sample multi-file torrent metainfo dict."""
        return {
            b"announce": b"http://tracker.example.com:8080/announce",
            b"announce-list": [
                [b"http://tracker.example.com:8080/announce"],
                [b"udp://backup.example.com:6969"],
            ],
            b"info": {
                b"name": b"test_dir",
                b"piece length": 16384,
                b"pieces": b"12345678901234567890" * 2,
                b"files": [
                    {b"length": 512, b"path": [b"file1.txt"]},
                    {b"length": 256, b"path": [b"subdir", b"file2.txt"]},
                ],
                b"private": 1,
            },
        }

    @pytest.fixture
    def torrent_info(self, sample_metainfo):
        """Create a TorrentInfo instance with sample data."""
        return TorrentInfo.from_bytes(bencode(sample_metainfo))

    def test_fields(self, torrent_info):
        """Test the decoded top-level fields."""
        assert torrent_info.announce == "http://tracker.example.com:8080/announce"
        assert torrent_info.created_by == "mktorrent"
        assert torrent_info.creation_date == 1700000000
        assert torrent_info.comment is None
        assert torrent_info.announce_list is None

    def test_info_fields(self, torrent_info):
        """Test the decoded info dict."""
        assert torrent_info.info.name == "test.txt"
        assert torrent_info.info.length == 1024
        assert torrent_info.info.piece_length == 16384
        assert torrent_info.info.files is None
        assert torrent_info.info.private is None

    def test_total_length_single_file(self, torrent_info):
        """Test the total length of a single file torrent."""
        assert torrent_info.total_length == 1024

    def test_multi_file(self, multi_file_metainfo):
        """Test decoding a multi-file torrent."""
        ti = TorrentInfo.from_bytes(bencode(multi_file_metainfo))
        assert ti.info.length is None
        assert ti.info.files == [
            FileInfo(length=512, path=["file1.txt"]),
            FileInfo(length=256, path=["subdir", "file2.txt"]),
        ]
        assert ti.total_length == 768
        assert ti.info.private is True
        assert ti.announce_list[1] == ["udp://backup.example.com:6969"]

    def test_pieces_property(self, torrent_info):
        """Test the pieces property splits pieces correctly."""
        pieces = torrent_info.pieces
        assert len(pieces) == 3
        assert all(len(piece) == 20 for piece in pieces)
        assert pieces[0] == b"12345678901234567890"

    def test_info_hash_property(self, torrent_info, sample_metainfo):
        """Test the info hash covers the whole info dict, unknown keys included."""
        info_bencoded = bencode(sample_metainfo[b"info"])
        expected_hash = hashlib.sha1(info_bencoded).digest()

        assert torrent_info.info_hash == expected_hash

    def test_str_representation(self, torrent_info):
        """Test string representation of TorrentInfo."""
        str_repr = str(torrent_info)
        assert "Tracker URL: http://tracker.example.com:8080/announce" in str_repr
        assert "Length: 1024" in str_repr
        assert "Piece Length: 16384" in str_repr
        assert f"Info Hash: {torrent_info.info_hash.hex()}" in str_repr

    def test_missing_length_and_files(self, sample_metainfo):
        """Test that an info dict needs length or files."""
        del sample_metainfo[b"info"][b"length"]
        with pytest.raises(CustomMessage):
            TorrentInfo.from_bytes(bencode(sample_metainfo))

    def test_bad_pieces_length(self, sample_metainfo):
        """Test that pieces must be a whole number of hashes."""
        sample_metainfo[b"info"][b"pieces"] = b"short"
        with pytest.raises(CustomMessage):
            TorrentInfo.from_bytes(bencode(sample_metainfo))

    def test_missing_info(self):
        """Test that the info dict is required."""
        with pytest.raises(CustomMessage):
            TorrentInfo.from_bytes(b"d8:announce3:urle")

    def test_from_file(self, tmp_path):
        """Test creating TorrentInfo from file."""
        metainfo = {
            b"announce": b"http://test.com/announce",
            b"info": {
                b"name": b"test.txt",
                b"length": 100,
                b"piece length": 16384,
                b"pieces": b"12345678901234567890",
            },
        }

        torrent_file = tmp_path / "test.torrent"
        torrent_file.write_bytes(bencode(metainfo))

        ti = TorrentInfo.from_file(str(torrent_file))
        assert ti.announce == "http://test.com/announce"
        assert ti.total_length == 100

    def test_from_file_not_found(self):
        """Test from_file with non-existent file."""
        with pytest.raises(FileNotFoundError):
            TorrentInfo.from_file("/non/existent/file.torrent")

    def test_from_file_invalid_content(self, tmp_path):
        """Test from_file with invalid torrent data."""
        invalid_file = tmp_path / "invalid.torrent"
        invalid_file.write_bytes(b"not a valid torrent file")

        with pytest.raises(BencodeError):
            TorrentInfo.from_file(str(invalid_file))

    def test_from_file_unsorted_keys(self, tmp_path):
        """Test that non-canonical files are rejected."""
        bad_file = tmp_path / "bad.torrent"
        bad_file.write_bytes(b"d4:infod4:name1:a6:lengthi1eee")

        with pytest.raises(ValueError):
            TorrentInfo.from_file(str(bad_file))
