"""
folio extract - Capture page screenshots for one or more documents.
"""

import sys
from pathlib import Path

from rich.console import Console

from infra.config import Config, load_library_config
from infra.pipeline.storage.library import Library
from infra.reader import SessionError
from pipeline.extract import ExtractionBatch, load_document_ids

console = Console()

EVENT_STYLES = {
    "skipped": "⏭️  [dim]{id}[/dim] already extracted",
    "started": "📖 [cyan]{id}[/cyan] extracting...",
    "completed": "✅ [green]{id}[/green] {detail}",
    "failed": "❌ [red]{id}[/red] {detail}",
}


def print_event(event: str, document_id: str, detail: str = ""):
    template = EVENT_STYLES.get(event)
    if template:
        console.print(template.format(id=document_id, detail=detail))


def collect_ids(args):
    ids = list(args.ids or [])
    if args.input:
        ids.extend(load_document_ids(Path(args.input)))
    return ids


def cmd_extract(args):
    ids = collect_ids(args)
    if not ids:
        console.print("[red]✗ No document ids given[/red] (pass ids or --input ids.csv)")
        sys.exit(1)

    library_config = load_library_config(Config.book_storage_root)
    if args.headless:
        library_config = library_config.model_copy(update={
            "reader": library_config.reader.model_copy(update={"headless": True})
        })

    library = Library(storage_root=Config.book_storage_root)
    batch = ExtractionBatch(
        library,
        library_config=library_config,
        include_back_matter=args.include_back_matter,
        max_pages=args.pages,
        restore_position=not args.no_restore_position,
        on_event=print_event,
    )

    console.print(f"\n📚 Extracting {len(ids)} document(s)\n")

    try:
        result = batch.run(ids)
    except SessionError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    console.print(
        f"\n✓ {len(result.completed)} extracted, "
        f"{len(result.skipped)} skipped, "
        f"{len(result.failed)} failed"
    )
    if result.failed:
        sys.exit(1)


def setup_parser(subparsers):
    extract_parser = subparsers.add_parser(
        'extract',
        help='Capture page screenshots from the reader'
    )
    extract_parser.add_argument(
        'ids',
        nargs='*',
        help='Document ids to extract'
    )
    extract_parser.add_argument(
        '--input',
        help='CSV file with a header row and one document id per row'
    )
    extract_parser.add_argument(
        '--pages',
        type=int,
        help='Stop after capturing this many pages'
    )
    extract_parser.add_argument(
        '--include-back-matter',
        action='store_true',
        help='Keep capturing through back matter (notes, index, ...)'
    )
    extract_parser.add_argument(
        '--no-restore-position',
        action='store_true',
        help='Leave the reader on the last captured page'
    )
    extract_parser.add_argument(
        '--headless',
        action='store_true',
        help='Run the browser without a window'
    )
    extract_parser.set_defaults(func=cmd_extract)
