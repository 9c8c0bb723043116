import logging
from typing import Optional
from urllib.parse import urlparse

from playwright.sync_api import sync_playwright, Error as PlaywrightError

from infra.config import Config, FolioConfig, ReaderSettings
from .errors import SessionError
from .playwright_surface import PlaywrightReaderSurface, SIGN_IN_PATH
from .surface import reader_url

EMAIL_INPUT_SELECTOR = 'input[type="email"]'
PASSWORD_INPUT_SELECTOR = 'input[type="password"]'
SUBMIT_SELECTOR = 'input[type="submit"]'


class ReaderSession:
    """One browser, one signed-in reader page, shared by every document in a run.

    Usage:
        with ReaderSession(settings) as session:
            surface = session.sign_in(first_document_id)
            ...
    """

    def __init__(
        self,
        settings: Optional[ReaderSettings] = None,
        config: Optional[FolioConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.settings = settings or ReaderSettings()
        self.config = config or Config
        self.logger = logger or logging.getLogger(__name__)

        self._playwright = None
        self._browser = None
        self._context = None
        self._surface: Optional[PlaywrightReaderSurface] = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def start(self):
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.settings.headless,
                channel=self.settings.channel,
                args=["--hide-crash-restore-bubble"],
                ignore_default_args=["--enable-automation"],
            )
            self._context = self._browser.new_context(
                device_scale_factor=self.settings.device_scale_factor,
                viewport={
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
            )
            page = self._context.new_page()
        except PlaywrightError as e:
            self.close()
            raise SessionError(f"Could not launch browser: {e}") from e

        self._surface = PlaywrightReaderSurface(page, self.settings, self.logger)

    @property
    def surface(self) -> PlaywrightReaderSurface:
        if self._surface is None:
            raise SessionError("Reader session has not been started")
        return self._surface

    def sign_in(self, document_id: str) -> PlaywrightReaderSurface:
        """Open the reader for document_id, completing the sign-in flow if prompted."""
        surface = self.surface
        page = surface.page
        url = reader_url(self.settings.base_url, document_id)
        timeout = self.settings.navigation_timeout_ms

        self.logger.info(f"Signing in using document {document_id}")

        try:
            page.goto(url, timeout=timeout)
        except PlaywrightError as e:
            raise SessionError(f"Could not reach reader at {url}: {e}") from e

        if surface.is_auth_redirect():
            if not self.config.has_credentials:
                raise SessionError("Sign-in required but AMAZON_EMAIL / AMAZON_PASSWORD are not set")

            try:
                page.locator(EMAIL_INPUT_SELECTOR).fill(self.config.amazon_email, timeout=timeout)
                page.locator(SUBMIT_SELECTOR).first.click()
                page.locator(PASSWORD_INPUT_SELECTOR).fill(self.config.amazon_password, timeout=timeout)
                page.locator(SUBMIT_SELECTOR).first.click()
            except PlaywrightError as e:
                raise SessionError(f"Sign-in form could not be completed: {e}") from e

        reader_host = urlparse(self.settings.base_url).hostname

        def at_reader(current: str) -> bool:
            parsed = urlparse(current)
            return parsed.hostname == reader_host and SIGN_IN_PATH not in parsed.path

        try:
            page.wait_for_url(at_reader, timeout=timeout)
        except PlaywrightError as e:
            raise SessionError(
                "Login failed or took too long. Check credentials and network connection."
            ) from e

        self.logger.info("Signed in to reader")
        return surface

    def close(self):
        for resource in (self._context, self._browser):
            if resource is None:
                continue
            try:
                resource.close()
            except PlaywrightError as e:
                self.logger.warning(f"Error closing browser resource: {e}")

        if self._playwright is not None:
            self._playwright.stop()

        self._context = None
        self._browser = None
        self._playwright = None
        self._surface = None
