"""
folio status - Show extraction and transcription state for every book.
"""

import json

from rich.console import Console
from rich.table import Table

from infra.config import Config
from infra.pipeline.storage.library import Library

console = Console()


def cmd_status(args):
    library = Library(storage_root=Config.book_storage_root)
    books = library.list_books()

    if args.json:
        print(json.dumps(books, indent=2))
        return

    if not books:
        console.print(f"No books in {library.storage_root}")
        return

    table = Table(title=f"Library: {library.storage_root}")
    table.add_column("Document", style="cyan")
    table.add_column("Title")
    table.add_column("Pages", justify="right")
    table.add_column("Transcripts", justify="right")
    table.add_column("Extracted", justify="center")
    table.add_column("Transcribed", justify="center")

    for book in books:
        storage = library.get_book_storage(book["document_id"])
        transcripts = len([
            p for p in storage.transcripts.list_files("*.json") if p.name != "metrics.json"
        ])
        table.add_row(
            book["document_id"],
            book["title"] or "[dim]-[/dim]",
            str(book["page_images"]),
            str(transcripts),
            "✓" if book["extracted"] else "",
            "✓" if book["transcribed"] else "",
        )

    console.print(table)


def setup_parser(subparsers):
    status_parser = subparsers.add_parser(
        'status',
        help='Show library status'
    )
    status_parser.add_argument(
        '--json',
        action='store_true',
        help='Output as JSON'
    )
    status_parser.set_defaults(func=cmd_status)
