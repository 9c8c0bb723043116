from typing import List, Optional, Tuple

from infra.config import ExtractionSettings, ReaderSettings
from infra.pipeline.storage import BookStorage
from infra.reader import ReaderSurface, ReaderActionError, TocRow, reader_url

from .errors import SessionExpiredError, MetadataTimeoutError, TocHarvestError
from .navigation import NavigationRetryDriver
from .page_nav import parse_page_nav
from .schemas import BookManifest, ContentBounds, PagePosition, PageSnapshot, TocEntry
from .side_channel import SideChannelCollector, default_rules
from .snapshots import snapshot_filename, snapshot_padding
from .toc_bounds import resolve_toc_bounds


class BookExtractor:
    """
    Captures every main-content page of one document as a screenshot.

    Flow:
    1. Open the document (sign-in redirect = expired session)
    2. Settle the reader UI (prompt, chrome animation, font/columns)
    3. Remember the starting position
    4. Walk the table of contents, recording each entry's position
    5. Resolve where main content starts and stops
    6. Jump to the first content entry
    7. Capture and turn pages until the content ends or navigation fails
    8. Wait for the document metadata seen on the network
    9. Write metadata.json; return the reader to the starting page
    """

    def __init__(
        self,
        surface: ReaderSurface,
        storage: BookStorage,
        settings: Optional[ExtractionSettings] = None,
        reader_settings: Optional[ReaderSettings] = None,
        include_back_matter: bool = False,
        max_pages: Optional[int] = None,
        restore_position: bool = True,
        logger=None
    ):
        self.surface = surface
        self.storage = storage
        self.settings = settings or ExtractionSettings()
        self.reader_settings = reader_settings or ReaderSettings()
        self.include_back_matter = include_back_matter
        self.max_pages = max_pages
        self.restore_position = restore_position

        self.stage_storage = storage.pages
        self.logger = logger or self.stage_storage.logger()

        self.driver = NavigationRetryDriver(
            surface,
            max_reissues=self.settings.max_reissues,
            polls_per_reissue=self.settings.polls_per_reissue,
            poll_interval_seconds=self.settings.poll_interval_seconds,
            logger=self.logger,
        )

    @property
    def document_id(self) -> str:
        return self.storage.document_id

    def extract(self) -> BookManifest:
        collector = SideChannelCollector(default_rules(self.document_id), logger=self.logger)
        collector.subscribe(self.surface)
        initial_position = None

        try:
            url = reader_url(self.reader_settings.base_url, self.document_id)
            self.logger.info(f"Opening {url}")
            self.surface.open(url)

            if self.surface.is_auth_redirect():
                raise SessionExpiredError("Login session expired or invalid.", self.document_id)

            self._settle_ui()

            initial_position = parse_page_nav(self.surface.footer_text())
            if initial_position:
                self.logger.info(
                    "Initial position",
                    page=initial_position.page,
                    location=initial_position.location,
                    total=initial_position.total,
                )

            toc = self._harvest_toc()
            entries = [entry for entry, _ in toc]

            bounds = resolve_toc_bounds(
                entries,
                back_matter_ratio=self.settings.back_matter_ratio,
                include_back_matter=self.include_back_matter,
            )
            self._log_bounds(bounds)

            self._jump_to(toc[bounds.first_content_entry.ordinal][1])

            pages = self._capture_pages(bounds)

            if not collector.wait_until_complete(
                self.surface,
                timeout_seconds=self.settings.metadata_timeout_seconds,
                poll_seconds=self.settings.metadata_poll_seconds,
            ):
                raise MetadataTimeoutError(
                    f"Timed out waiting for document metadata ({', '.join(collector.missing)})",
                    self.document_id,
                )

            manifest = BookManifest(
                document_id=self.document_id,
                document_info=collector.get("document_info"),
                document_meta=collector.get("document_meta"),
                toc=entries,
                pages=pages,
            )
            self.storage.save_metadata(manifest.model_dump(mode="json"))
            self.logger.info(f"Wrote manifest with {len(pages)} pages", total=len(pages))

            return manifest

        finally:
            collector.unsubscribe()
            if self.restore_position and initial_position is not None:
                self._restore(initial_position)

    def _settle_ui(self):
        self.surface.dismiss_blocking_prompt()
        self.surface.freeze_chrome()
        if not self.surface.apply_display_settings():
            self.logger.warning("Could not fully apply display settings; continuing")

    def _read_position(self) -> Optional[PagePosition]:
        for _ in range(self.settings.position_read_attempts):
            position = parse_page_nav(self.surface.footer_text())
            if position is not None:
                return position
            self.surface.wait(self.settings.position_read_interval_seconds)
        return None

    def _harvest_toc(self) -> List[Tuple[TocEntry, TocRow]]:
        try:
            self.surface.open_toc()
        except ReaderActionError as e:
            raise TocHarvestError(f"Could not open table of contents: {e}", self.document_id) from e

        rows = self.surface.toc_rows()
        self.logger.info(f"Reading {len(rows)} TOC items", total=len(rows))

        toc = []
        for ordinal, row in enumerate(rows):
            row.scroll_into_view()

            title = row.title()
            if not title:
                raise TocHarvestError(f"TOC item {ordinal} has no title", self.document_id)

            try:
                row.activate()
            except ReaderActionError as e:
                raise TocHarvestError(f"Could not open TOC item {title!r}: {e}", self.document_id) from e
            self.surface.wait(self.settings.toc_settle_seconds)

            position = self._read_position()
            if position is None:
                raise TocHarvestError(f"No page position after opening TOC item {title!r}", self.document_id)

            entry = TocEntry(title=title, position=position, ordinal=ordinal)
            toc.append((entry, row))
            self.logger.info(
                "TOC item discovered",
                title=title,
                index=ordinal,
                page=entry.page,
                location=entry.location,
                total=entry.total,
            )

            if entry.page is not None and entry.page >= entry.total:
                break

        return toc

    def _log_bounds(self, bounds: ContentBounds):
        first = bounds.first_content_entry
        after = bounds.after_last_content_entry
        if after is not None:
            message = (
                f"Reading {bounds.content_page_count} pages (of {first.total} total, "
                f"stopping at {after.title!r})"
            )
        else:
            message = f"Reading {bounds.content_page_count} pages"
        self.logger.info(message, title=first.title, page=first.page, total=bounds.content_page_count)

    def _jump_to(self, row: TocRow):
        row.scroll_into_view()
        try:
            row.activate()
        except ReaderActionError as e:
            raise TocHarvestError(f"Could not jump to first content page: {e}", self.document_id) from e
        self.surface.wait(self.settings.toc_settle_seconds)
        self.surface.close_toc()

    def _capture_pages(self, bounds: ContentBounds) -> List[PageSnapshot]:
        padding = snapshot_padding(bounds.first_content_entry.total)
        pages_dir = self.stage_storage.output_dir.name
        pages: List[PageSnapshot] = []

        while True:
            position = parse_page_nav(self.surface.footer_text())
            if position is None or position.page is None:
                break
            if position.page > bounds.content_page_count:
                break
            if self.max_pages is not None and len(pages) >= self.max_pages:
                self.logger.info(f"Reached page limit ({self.max_pages})")
                break

            index = len(pages)
            fingerprint = self.surface.page_fingerprint()
            image = self.surface.capture_page()

            filename = snapshot_filename(index, position.page, padding)
            self.stage_storage.save_bytes(filename, image)

            snapshot = PageSnapshot(
                index=index,
                page=position.page,
                total=position.total,
                image_path=f"{pages_dir}/{filename}",
            )
            pages.append(snapshot)
            self.logger.info("Page captured", index=index, page=position.page, total=position.total)

            self.surface.wait(self.settings.post_capture_settle_seconds)

            result = self.driver.advance(fingerprint)
            if not result.advanced:
                break

        return pages

    def _restore(self, position: PagePosition):
        if position.page is None:
            self.logger.info("Starting position had no page number; not restoring", location=position.location)
            return

        try:
            restored = self.surface.go_to_page(position.page)
        except ReaderActionError as e:
            self.logger.warning("Could not restore starting page", page=position.page, error=str(e))
            return

        if restored:
            self.logger.info("Restored starting page", page=position.page)
        else:
            self.logger.warning("Could not restore starting page", page=position.page)
