import argparse
import logging
import sys

from .bencode import Decoder
from .errors import BencodeError
from .torrent_info import TorrentInfo

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="bencodec", description="Inspect bencoded files"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    show = subparsers.add_parser("show", help="print every top-level value")
    show.add_argument("file")
    info = subparsers.add_parser("info", help="summarize a .torrent file")
    info.add_argument("file")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        format="%(levelname)s:%(name)s:%(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    try:
        match args.command:
            case "show":
                with open(args.file, "rb") as f:
                    for value in Decoder(f):
                        print(repr(value))
            case "info":
                print(TorrentInfo.from_file(args.file))
    except BencodeError as e:
        print(f"error: {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
