"""
folio transcribe - Turn captured page screenshots into text.
"""

import sys

from rich.console import Console

from infra.config import Config, load_library_config
from infra.pipeline.rich_progress import RichProgressBar
from infra.pipeline.storage.library import Library
from infra.transcription import create_transcriber
from pipeline.transcribe import (
    PageTranscriber,
    TranscriptionError,
    TranscriptionRetryPolicy,
    manifest_images,
    transcribe_book,
)

console = Console()


def select_books(library: Library, ids, force: bool):
    """Explicit ids, or every book with a manifest; completed ones skipped unless forced."""
    transcribed = library.ledger("transcribe").load()

    if ids:
        candidates = list(dict.fromkeys(ids))
    else:
        candidates = [b["document_id"] for b in library.list_books() if b["has_manifest"]]

    selected = []
    for document_id in candidates:
        if not force and document_id in transcribed:
            console.print(f"⏭️  [dim]{document_id}[/dim] already transcribed")
            continue
        selected.append(document_id)
    return selected


def cmd_transcribe(args):
    library_config = load_library_config(Config.book_storage_root)
    settings = library_config.transcription
    transcriber_name = args.transcriber or settings.transcriber
    workers = args.workers or settings.max_workers

    try:
        provider = create_transcriber(transcriber_name, library_config)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    library = Library(storage_root=Config.book_storage_root)
    document_ids = select_books(library, args.ids, args.force)
    if not document_ids:
        console.print("Nothing to transcribe")
        return

    console.print(f"\n📝 Transcribing {len(document_ids)} book(s) with {transcriber_name} ({provider.name})\n")

    failures = 0
    for document_id in document_ids:
        storage = library.get_book_storage(document_id)
        try:
            images = manifest_images(storage)
        except TranscriptionError as e:
            console.print(f"❌ [red]{document_id}[/red] {e}")
            failures += 1
            continue
        if not images:
            console.print(f"❌ [red]{document_id}[/red] manifest lists no pages")
            failures += 1
            continue

        page_transcriber = PageTranscriber(
            provider,
            policy=TranscriptionRetryPolicy.from_settings(settings),
            refusal_max_chars=settings.refusal_max_chars,
            metrics_manager=storage.transcripts.metrics_manager,
            logger=storage.transcripts.logger(),
        )

        progress = RichProgressBar(total=len(images), prefix=f"{document_id} ")
        try:
            with progress:
                transcripts = transcribe_book(
                    storage,
                    page_transcriber,
                    max_workers=workers,
                    force=args.force,
                    on_progress=lambda path, _: progress.advance(suffix=path.name),
                )
        except TranscriptionError as e:
            console.print(f"❌ [red]{document_id}[/red] {e}")
            failures += 1
            continue

        library.ledger("transcribe").mark_completed(document_id)
        console.print(
            f"✅ [green]{document_id}[/green] {len(transcripts)}/{len(images)} pages → {storage.content_file}"
        )

    if failures:
        sys.exit(1)


def setup_parser(subparsers):
    transcribe_parser = subparsers.add_parser(
        'transcribe',
        help='Transcribe captured pages with a vision model'
    )
    transcribe_parser.add_argument(
        'ids',
        nargs='*',
        help='Document ids (default: every extracted book)'
    )
    transcribe_parser.add_argument(
        '--transcriber',
        help='Transcriber name from config.yaml (default: transcription.transcriber)'
    )
    transcribe_parser.add_argument(
        '--workers',
        type=int,
        help='Concurrent transcription requests (default: transcription.max_workers)'
    )
    transcribe_parser.add_argument(
        '--force',
        action='store_true',
        help='Re-transcribe pages and books that already finished'
    )
    transcribe_parser.set_defaults(func=cmd_transcribe)
