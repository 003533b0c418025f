import hashlib
import logging
from dataclasses import dataclass, field

from .bencode import Decoder, Encoder
from .errors import CustomMessage
from .shapes import U64
from .typed_decoder import from_bytes

PIECE_HASH_SIZE = 20

logger = logging.getLogger(__name__)


@dataclass
class FileInfo:
    length: U64
    path: list[str]


@dataclass
class InfoDict:
    name: str
    piece_length: U64 = field(metadata={"bencode": "piece length"})
    pieces: bytes
    length: U64 | None = None
    files: list[FileInfo] | None = None
    private: bool | None = None


@dataclass
class TorrentInfo:
    info: InfoDict
    announce: str | None = None
    announce_list: list[list[str]] | None = field(
        default=None, metadata={"bencode": "announce-list"}
    )
    comment: str | None = None
    created_by: str | None = field(default=None, metadata={"bencode": "created by"})
    creation_date: int | None = field(
        default=None, metadata={"bencode": "creation date"}
    )
    # SHA-1 of the canonical encoding of the raw info dict.
    info_hash: bytes = field(default=b"", init=False, repr=False, compare=False)

    def __str__(self):
        str = f"Tracker URL: {self.announce}\n"
        str += f"Length: {self.total_length}\n"
        str += f"Info Hash: {self.info_hash.hex()}\n"
        str += f"Piece Length: {self.info.piece_length}\n"
        str += "\n".join([x.hex() for x in self.pieces])
        return str

    @property
    def pieces(self) -> list[bytes]:
        all = self.info.pieces
        return [all[i : i + PIECE_HASH_SIZE] for i in range(0, len(all), PIECE_HASH_SIZE)]

    @property
    def total_length(self) -> int:
        if self.info.length is not None:
            return self.info.length
        return sum(f.length for f in self.info.files or [])

    @classmethod
    def from_bytes(cls, data: bytes) -> "TorrentInfo":
        torrent = from_bytes(cls, data)

        if torrent.info.length is None and torrent.info.files is None:
            raise CustomMessage("info dict needs either `length` or `files`")
        if len(torrent.info.pieces) % PIECE_HASH_SIZE:
            raise CustomMessage(
                f"`pieces` length {len(torrent.info.pieces)} is not a multiple of {PIECE_HASH_SIZE}"
            )

        # Hash the info dict as parsed, so keys unknown to InfoDict still count.
        metainfo = Decoder(data).decode()
        torrent.info_hash = hashlib.sha1(Encoder().encode(metainfo["info"])).digest()
        return torrent

    @classmethod
    def from_file(cls, file: str) -> "TorrentInfo":
        with open(file, mode="rb") as f:
            data = f.read()
        torrent = cls.from_bytes(data)
        logger.info(f"Loaded {file}: {torrent.info.name!r}, {len(torrent.pieces)} pieces")
        return torrent
