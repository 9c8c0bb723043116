import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from infra.pipeline.logger import console_logger
from infra.pipeline.storage import BookStorage, MetricsManager, PageMetrics
from infra.transcription import TranscriptionProvider
from pipeline.extract.schemas import BookManifest

from .errors import RefusalLimitError, SnapshotNameError, TranscriptionError
from .postprocess import clean_transcript, refusal_reason
from .retry import TranscriptionRetryPolicy
from .schemas import PageTranscript

SNAPSHOT_NAME = re.compile(r"^0*(\d+)-0*(\d+)\.png$")


def parse_snapshot_name(name: str) -> Tuple[int, int]:
    """'007-042.png' -> (7, 42)"""
    match = SNAPSHOT_NAME.match(name)
    if not match:
        raise SnapshotNameError(f"Invalid screenshot filename: {name}", image_path=name)
    return int(match.group(1)), int(match.group(2))


class PageTranscriber:
    """
    Transcribes one screenshot, retrying empty output and refusals.

    Outcomes:
    - PageTranscript: first non-empty, non-refusal output
    - None: every attempt came back empty
    - RefusalLimitError: the final attempt was still a refusal
    - TranscriptionProviderError: the backend failed (not retried here)
    """

    def __init__(
        self,
        provider: TranscriptionProvider,
        policy: Optional[TranscriptionRetryPolicy] = None,
        refusal_max_chars: int = 100,
        metrics_manager: Optional[MetricsManager] = None,
        logger=None
    ):
        self.provider = provider
        self.policy = policy or TranscriptionRetryPolicy()
        self.refusal_max_chars = refusal_max_chars
        self.metrics_manager = metrics_manager
        self.logger = logger or console_logger("transcribe")

    def transcribe(self, image_path: Path) -> Optional[PageTranscript]:
        image_path = Path(image_path)
        index, page = parse_snapshot_name(image_path.name)

        start_time = time.time()
        metrics = PageMetrics(page=page)

        try:
            image_bytes = image_path.read_bytes()

            for attempt in self.policy.attempts():
                metrics.attempts = attempt
                temperature = self.policy.temperature_for(attempt)

                result = self.provider.transcribe(
                    image_bytes,
                    self.policy.system_prompt_for(attempt),
                    temperature,
                )
                metrics.prompt_tokens += result.prompt_tokens
                metrics.completion_tokens += result.completion_tokens

                text = clean_transcript(result.text)
                if not text:
                    self.logger.info(
                        "Empty transcription, retrying",
                        index=index, page=page, attempt=attempt, temperature=temperature,
                    )
                    continue

                if refusal_reason(text, self.refusal_max_chars):
                    metrics.refusals += 1
                    if self.policy.is_last(attempt):
                        metrics.outcome = "refused"
                        raise RefusalLimitError(
                            f"Model refused too many times ({attempt} times): {text}",
                            image_path=str(image_path),
                        )
                    self.logger.warning(
                        "Retrying refusal",
                        index=index, page=page, attempt=attempt, temperature=temperature, text=text,
                    )
                    continue

                metrics.outcome = "transcribed"
                transcript = PageTranscript(
                    index=index,
                    page=page,
                    text=text,
                    source_image=str(image_path),
                )
                self.logger.info(
                    "Page transcribed",
                    index=index, page=page, attempt=attempt, temperature=temperature,
                )
                return transcript

            metrics.outcome = "empty"
            self.logger.warning(
                f"No usable transcription after {metrics.attempts} attempts",
                index=index, page=page, retries=metrics.attempts,
            )
            return None

        finally:
            if self.metrics_manager is not None:
                metrics.time_seconds = time.time() - start_time
                self.metrics_manager.record_page(index, metrics)


def _checkpoint_name(image_path: Path) -> str:
    return f"{image_path.stem}.json"


def manifest_images(storage: BookStorage) -> List[Path]:
    """Screenshot paths listed in metadata.json, in capture order.

    Screenshots without a manifest belong to an extraction that never
    finished, so they are not transcribed.
    """
    if not storage.has_metadata:
        raise TranscriptionError(f"No manifest for {storage.document_id}; run extraction first")

    try:
        manifest = BookManifest.model_validate(storage.load_metadata())
    except (ValueError, OSError) as e:
        raise TranscriptionError(f"Unreadable manifest {storage.metadata_file}: {e}") from e

    return [storage.book_dir / snapshot.image_path for snapshot in sorted(manifest.pages, key=lambda p: p.index)]


def transcribe_book(
    storage: BookStorage,
    transcriber: PageTranscriber,
    max_workers: int = 1,
    force: bool = False,
    on_progress: Optional[Callable[[Path, Optional[PageTranscript]], None]] = None,
    logger=None
) -> List[PageTranscript]:
    """
    Transcribe every screenshot the manifest lists and write content.json.

    Accepted pages are checkpointed to transcripts/{stem}.json as they finish,
    so an interrupted run picks up where it stopped (unless force=True).
    Any per-page failure is logged and the page is left out.
    """
    stage_storage = storage.transcripts
    logger = logger or stage_storage.logger()

    images = manifest_images(storage)
    if not images:
        raise TranscriptionError(f"Manifest for {storage.document_id} lists no pages")

    transcripts: List[PageTranscript] = []
    pending: List[Path] = []

    for image_path in images:
        checkpoint = _checkpoint_name(image_path)
        if not force and stage_storage.has_file(checkpoint):
            transcripts.append(PageTranscript(**stage_storage.load_file(checkpoint)))
            if on_progress:
                on_progress(image_path, transcripts[-1])
        else:
            pending.append(image_path)

    if transcripts:
        logger.info(f"Resuming: {len(transcripts)} pages already transcribed", total=len(images))

    def process(image_path: Path) -> Optional[PageTranscript]:
        transcript = transcriber.transcribe(image_path)
        if transcript is not None:
            stage_storage.save_file(_checkpoint_name(image_path), transcript.model_dump(), schema=PageTranscript)
        return transcript

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {executor.submit(process, image_path): image_path for image_path in pending}

        for future in as_completed(futures):
            image_path = futures[future]
            transcript = None
            try:
                transcript = future.result()
            except Exception as e:
                # Corrupt images and backend failures only cost this page
                logger.error(
                    f"Error processing image {image_path.name}: {e}",
                    path=str(image_path),
                    error=type(e).__name__,
                )
            else:
                if transcript is not None:
                    transcripts.append(transcript)

            if on_progress:
                on_progress(image_path, transcript)

    transcripts.sort(key=lambda t: t.index)
    storage.save_content([t.model_dump() for t in transcripts])

    logger.info(
        f"Wrote content.json with {len(transcripts)} of {len(images)} pages",
        total=len(transcripts),
    )
    return transcripts
