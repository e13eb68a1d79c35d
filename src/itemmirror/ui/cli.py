# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from itemmirror.app import open_filesystem_mirror
from itemmirror.common.logging import configure_logging
from itemmirror.domain.identity import require_guid
from itemmirror.domain.model import PhantomNote

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from itemmirror.domain.model import AssociationRecord

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mirror folders as XooML2 fragments")
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Store root directory (defaults to ITEMMIRROR_ROOT)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print the fragment for a folder")
    show.add_argument("folder", nargs="?", default="", help="Folder relative to the root")

    listing = subparsers.add_parser("list", help="List the associations of a folder")
    listing.add_argument("folder", nargs="?", default="", help="Folder relative to the root")

    sync = subparsers.add_parser("sync", help="Reconcile a folder's fragment with its contents")
    sync.add_argument("folder", nargs="?", default="", help="Folder relative to the root")

    note = subparsers.add_parser("note", help="Add a phantom note association")
    note.add_argument("text", type=str, help="Display text of the note")
    note.add_argument("--folder", type=str, default="", help="Folder relative to the root")

    delete = subparsers.add_parser("delete", help="Delete an association and its item")
    delete.add_argument("guid", type=str, help="Identity of the association")
    delete.add_argument("--folder", type=str, default="", help="Folder relative to the root")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.command == "note" and not args.text.strip():
        raise ValueError("Note text must not be blank")
    if args.command == "delete":
        try:
            require_guid(args.guid)
        except TypeError as exc:
            raise ValueError(str(exc)) from exc


def _describe(record: AssociationRecord) -> str:
    if record.is_grouping:
        kind = "folder"
    elif record.local_item:
        kind = "item"
    else:
        kind = "note"
    return f"{record.id}  {kind:<6}  {record.display_text or ''}"


async def _run_command(args: argparse.Namespace) -> None:
    mirror = await open_filesystem_mirror(args.folder, root=args.root)

    if args.command == "show":
        print(mirror.document.to_text(), end="")
    elif args.command == "list":
        for record in mirror.associations():
            print(_describe(record))
    elif args.command == "sync":
        result = mirror.last_result
        if result is not None:
            log.info(
                "Sync finished: removed=%s, added=%s, kept=%s",
                len(result.removed),
                len(result.added),
                len(result.kept),
            )
    elif args.command == "note":
        guid = await mirror.create_association(PhantomNote(display_text=args.text))
        print(guid)
    elif args.command == "delete":
        await mirror.delete_association(args.guid)
        log.info("Deleted association %s", args.guid)
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    if parsed_args.verbose:
        configure_logging(level=logging.DEBUG, force=True)

    try:
        asyncio.run(_run_command(parsed_args))
    except Exception:
        log.exception("Fatal error running %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
