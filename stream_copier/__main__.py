"""
Entry point for the stream_copier component.
"""

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .application.domain import CopyMode, DecompressionMethod
from .application.exceptions import CopierError
from .infrastructure.containers import Container

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


def _progress_bar(path: Path, desc: str) -> tqdm:
    total = path.stat().st_size if path.is_file() else None
    return tqdm(total=total, unit="B", unit_scale=True, desc=desc)


def _run_copy(service, args: argparse.Namespace):
    if args.mode == CopyMode.LINE.value:
        lines = service.line_copy(args.source, args.destination, args.encoding)
        print(f"{lines} lines")
        return

    with _progress_bar(Path(args.source), Path(args.source).name) as bar:
        result = service.copy_file(
            args.source,
            args.destination,
            args.mode,
            buffer_size=args.buffer_size,
            staged=args.in_memory,
            progress=bar.update,
        )
    print(f"{result.count} bytes")


def _run_line_copy(service, args: argparse.Namespace):
    lines = service.line_copy(args.source, args.destination, args.encoding)
    print(f"{lines} lines")


def _run_read_text(service, args: argparse.Namespace):
    sys.stdout.write(service.read_encoded_text(args.source, args.encoding))


def _run_decompress(service, args: argparse.Namespace):
    with tqdm(unit="B", unit_scale=True, desc=Path(args.source).name) as bar:
        count = service.decompress_to_file(
            args.source, args.destination, args.method, progress=bar.update
        )
    print(f"{count} bytes")


def _run_hash(service, args: argparse.Namespace):
    print(service.hash_file(args.source, args.algorithm))


def build_parser(default_algorithm: str = "SHA256") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stream-copier",
        description="Copy, decode, decompress and hash files.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    copy = commands.add_parser("copy", help="Copy a file in byte, block or line mode.")
    copy.add_argument("source")
    copy.add_argument("destination")
    copy.add_argument(
        "--mode",
        choices=[mode.value for mode in CopyMode],
        default=CopyMode.BLOCK.value,
        help="Transfer granularity.",
    )
    copy.add_argument("--buffer-size", type=int, default=None, help="Bytes per read.")
    copy.add_argument(
        "--in-memory",
        action="store_true",
        help="Stage the whole source in memory before writing.",
    )
    copy.add_argument("--encoding", default=None, help="Target encoding for line mode.")
    copy.set_defaults(handler=_run_copy)

    line_copy = commands.add_parser(
        "line-copy", help="Copy a UTF-8 text file line by line, re-encoding it."
    )
    line_copy.add_argument("source")
    line_copy.add_argument("destination")
    line_copy.add_argument("--encoding", default=None)
    line_copy.set_defaults(handler=_run_line_copy)

    read_text = commands.add_parser("read-text", help="Print a file decoded with an encoding.")
    read_text.add_argument("source")
    read_text.add_argument("--encoding", required=True)
    read_text.set_defaults(handler=_run_read_text)

    decompress = commands.add_parser("decompress", help="Decompress a file.")
    decompress.add_argument("source")
    decompress.add_argument("destination")
    decompress.add_argument(
        "--method",
        required=True,
        help=f"One of: {', '.join(m.value for m in DecompressionMethod)}.",
    )
    decompress.set_defaults(handler=_run_decompress)

    digest = commands.add_parser("hash", help="Print the hex digest of a file.")
    digest.add_argument("source")
    digest.add_argument("--algorithm", default=default_algorithm)
    digest.set_defaults(handler=_run_hash)

    return parser


def main(argv=None, container: Container = None):
    """Wires the container and runs the requested command."""

    container = container or Container()

    try:
        config = container.config()
    except CopierError as e:
        logger.error(f"An application error occurred: {e}")
        sys.exit(1)

    args = build_parser(config.digest.default_algorithm).parse_args(argv)
    setup_logging(level=config.logging.level)

    try:
        service = container.stream_service()
        with logging_redirect_tqdm():
            args.handler(service, args)
    except CopierError as e:
        logger.error(f"An application error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
