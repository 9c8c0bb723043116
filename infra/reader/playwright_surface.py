import logging
from typing import List, Optional
from urllib.parse import urlparse

from playwright.sync_api import Page, Locator, Error as PlaywrightError

from infra.config import ReaderSettings
from .errors import ReaderActionError
from .surface import ReaderSurface, TocRow, ResponseHandler

PAGE_IMAGE_SELECTOR = "#kr-renderer .kg-full-page-img img"
READER_HEADER_SELECTOR = "#reader-header"
TOP_CHROME_SELECTOR = ".top-chrome"
READER_SETTINGS_BUTTON = 'ion-button[item-i-d="top_menu_reader_settings"]'
TOC_BUTTON = 'ion-button[item-i-d="top_menu_table_of_contents"]'
NAVIGATION_MENU_BUTTON = 'ion-button[item-i-d="top_menu_navigation_menu"]'
TOC_ITEM_SELECTOR = "ion-list ion-item.toc-item"
TOC_ITEM_BUTTON_SELECTOR = "button.toc-item-button"
TOC_CHAPTER_TITLE_SELECTOR = ".chapter-title"
SIDE_MENU_CLOSE_SELECTOR = ".side-menu-close-button"
GO_TO_PAGE_MENU_ITEM_SELECTOR = 'ion-item[role="listitem"]'
GO_TO_PAGE_INPUT_SELECTOR = 'ion-modal input[placeholder="page number"]'
GO_TO_PAGE_BUTTON_SELECTOR = 'ion-modal ion-button[item-i-d="go-to-modal-go-button"]'
NEXT_PAGE_BUTTON_SELECTOR = "button#kr-chevron-right"
FOOTER_TEXT_SELECTORS = (
    'ion-title[item-i-d="reader-footer-title"] .text-div',
    "ion-footer ion-title",
)
ALERT_ROOT_SELECTORS = ("ion-alert", '[role="alertdialog"]')
SIGN_IN_PATH = "/ap/signin"

CLICK_TIMEOUT_MS = 1000


class PlaywrightTocRow(TocRow):
    def __init__(self, item: Locator):
        self._item = item

    def title(self) -> Optional[str]:
        try:
            raw = self._item.locator(TOC_ITEM_BUTTON_SELECTOR).first.get_attribute("aria-label")
            if not raw:
                title_node = self._item.locator(TOC_CHAPTER_TITLE_SELECTOR).first
                raw = title_node.text_content() if title_node.count() > 0 else self._item.text_content()
        except PlaywrightError:
            return None

        title = " ".join((raw or "").split())
        return title or None

    def activate(self) -> None:
        try:
            self._item.locator(TOC_ITEM_BUTTON_SELECTOR).first.click(timeout=CLICK_TIMEOUT_MS * 5)
        except PlaywrightError as e:
            raise ReaderActionError(f"Could not activate TOC row: {e}") from e

    def scroll_into_view(self) -> None:
        try:
            self._item.scroll_into_view_if_needed()
        except PlaywrightError:
            pass


class PlaywrightReaderSurface(ReaderSurface):
    """ReaderSurface backed by a Playwright page showing the web reader."""

    def __init__(self, page: Page, settings: Optional[ReaderSettings] = None, logger: Optional[logging.Logger] = None):
        self.page = page
        self.settings = settings or ReaderSettings()
        self.logger = logger or logging.getLogger(__name__)

    def open(self, url: str) -> None:
        try:
            self.page.goto(url, timeout=self.settings.navigation_timeout_ms)
        except PlaywrightError as e:
            raise ReaderActionError(f"Could not open {url}: {e}") from e

    def current_url(self) -> str:
        return self.page.url

    def is_auth_redirect(self) -> bool:
        return SIGN_IN_PATH in urlparse(self.current_url()).path

    def _reveal_header(self):
        try:
            header = self.page.locator(READER_HEADER_SELECTOR).first
            if header.count() > 0:
                header.hover(force=True)
                self.page.wait_for_timeout(200)
        except PlaywrightError:
            pass

    def dismiss_blocking_prompt(self) -> bool:
        for selector in ALERT_ROOT_SELECTORS:
            try:
                no_button = self.page.locator(selector).locator("button", has_text="No").first
                if no_button.count() > 0 and no_button.is_visible():
                    no_button.click()
                    self.page.wait_for_timeout(200)
                    self.logger.info("Dismissed blocking reader prompt")
                    return True
            except PlaywrightError:
                continue
        return False

    def freeze_chrome(self) -> bool:
        try:
            top_chrome = self.page.locator(TOP_CHROME_SELECTOR).first
            if top_chrome.count() == 0:
                return False
            top_chrome.evaluate("""
                (el) => {
                    el.style.transition = "none";
                    el.style.transform = "none";
                }
            """)
            return True
        except PlaywrightError:
            return False

    def apply_display_settings(self) -> bool:
        self._reveal_header()
        settings_button = self.page.locator(READER_SETTINGS_BUTTON).first
        try:
            settings_button.click(timeout=CLICK_TIMEOUT_MS * 5)
            self.page.wait_for_timeout(500)
        except PlaywrightError:
            self.logger.warning("Reader settings button not available")
            return False

        applied = False
        for selector in ("#AmazonEmber", 'span[aria-label="Single Column"]'):
            try:
                option = self.page.locator(selector).first
                if option.count() > 0 and option.is_visible():
                    option.click()
                    applied = True
                    self.page.wait_for_timeout(200)
            except PlaywrightError:
                continue

        try:
            self._reveal_header()
            settings_button.click(timeout=CLICK_TIMEOUT_MS)
            self.page.wait_for_timeout(1000)
        except PlaywrightError:
            pass

        return applied

    def footer_text(self) -> Optional[str]:
        for selector in FOOTER_TEXT_SELECTORS:
            try:
                locator = self.page.locator(selector).first
                if locator.count() == 0:
                    continue
                text = locator.text_content()
                if text and text.strip():
                    return text.strip()
            except PlaywrightError:
                continue
        return None

    def page_fingerprint(self) -> Optional[str]:
        try:
            locator = self.page.locator(PAGE_IMAGE_SELECTOR).first
            if locator.count() == 0:
                return None
            return locator.get_attribute("src")
        except PlaywrightError:
            return None

    def capture_page(self) -> bytes:
        locator = self.page.locator(PAGE_IMAGE_SELECTOR).first
        try:
            return locator.screenshot(type="png", scale="css")
        except PlaywrightError:
            self.logger.warning("Page image capture failed, using viewport screenshot")

        try:
            return self.page.screenshot(type="png", scale="css")
        except PlaywrightError as e:
            raise ReaderActionError(f"Screenshot failed: {e}") from e

    def advance(self) -> None:
        try:
            self.page.locator(NEXT_PAGE_BUTTON_SELECTOR).first.click(timeout=CLICK_TIMEOUT_MS)
        except PlaywrightError as e:
            raise ReaderActionError(f"Next page control unavailable: {e}") from e

    def _toc_open(self) -> bool:
        for selector in (SIDE_MENU_CLOSE_SELECTOR, TOC_ITEM_SELECTOR):
            try:
                node = self.page.locator(selector).first
                if node.count() > 0 and node.is_visible():
                    return True
            except PlaywrightError:
                continue
        return False

    def open_toc(self) -> None:
        if self._toc_open():
            return

        self._reveal_header()
        try:
            self.page.locator(TOC_BUTTON).first.click(timeout=CLICK_TIMEOUT_MS * 5)
            self.page.wait_for_timeout(1000)
        except PlaywrightError as e:
            raise ReaderActionError(f"Could not open table of contents: {e}") from e

    def close_toc(self) -> None:
        if not self._toc_open():
            return

        try:
            close_button = self.page.locator(SIDE_MENU_CLOSE_SELECTOR).first
            if close_button.count() > 0 and close_button.is_visible():
                close_button.click()
            else:
                self._reveal_header()
                self.page.locator(TOC_BUTTON).first.click(timeout=CLICK_TIMEOUT_MS)
            self.page.wait_for_timeout(250)
        except PlaywrightError:
            self.page.keyboard.press("Escape")
            self.page.wait_for_timeout(200)

        if self._toc_open():
            self.logger.warning("Table of contents did not fully close")

    def toc_rows(self) -> List[TocRow]:
        try:
            items = self.page.locator(TOC_ITEM_SELECTOR).all()
        except PlaywrightError as e:
            raise ReaderActionError(f"Could not list TOC items: {e}") from e
        return [PlaywrightTocRow(item) for item in items]

    def go_to_page(self, page: int) -> bool:
        if page is None or page < 1:
            return False

        try:
            self._reveal_header()
            self.page.locator(NAVIGATION_MENU_BUTTON).first.click(timeout=CLICK_TIMEOUT_MS * 5)
            self.page.wait_for_timeout(1000)

            go_to_item = self.page.locator(GO_TO_PAGE_MENU_ITEM_SELECTOR, has_text="Go to Page").first
            go_to_item.wait_for(state="visible", timeout=CLICK_TIMEOUT_MS * 5)
            go_to_item.click()

            self.page.locator(GO_TO_PAGE_INPUT_SELECTOR).first.fill(str(page))
            self.page.locator(GO_TO_PAGE_BUTTON_SELECTOR).first.click()
            self.page.wait_for_timeout(1000)
            return True
        except PlaywrightError as e:
            self.logger.warning(f"Go to page {page} failed: {e}")
            return False

    def wait(self, seconds: float) -> None:
        self.page.wait_for_timeout(seconds * 1000)

    def subscribe(self, handler: ResponseHandler) -> None:
        self.page.on("response", handler)

    def unsubscribe(self, handler: ResponseHandler) -> None:
        self.page.remove_listener("response", handler)
