from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .config import BrowserConfig
from .errors import BrowserLaunchError

logger = logging.getLogger(__name__)

HIDE_WEBDRIVER_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
window.chrome = window.chrome || { runtime: {} };
Object.defineProperty(navigator, 'languages', { get: () => ['zh-TW', 'zh', 'en-US', 'en'] });
"""

EVASION_ARGS = ["--disable-blink-features=AutomationControlled"]
LOCAL_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


@dataclass
class SessionHandle:
    """Live browser objects owned by one crawl run."""

    playwright: Any
    browser: Any
    context: Any
    page: Any
    released: bool = False


class BrowserSession:
    """Acquires and releases a Chromium session configured for evasion.

    In hosted mode Playwright's bundled headless Chromium is launched; in
    local mode a desktop Chrome installation is launched with the sandbox
    disabled. Every session gets the configured user agent, viewport, locale
    and headers, hides the automation flag, and aborts requests for heavy
    resource types.

    ``release`` must run exactly once for every successful ``acquire``; the
    context-manager form guarantees it.
    """

    def __init__(self, config: BrowserConfig, driver_factory: Callable[[], Any] = sync_playwright) -> None:
        self._config = config
        self._driver_factory = driver_factory
        self._handle: Optional[SessionHandle] = None

    def acquire(self) -> SessionHandle:
        playwright = None
        browser = None
        try:
            playwright = self._driver_factory().start()
            browser = playwright.chromium.launch(**self._launch_options())
            context = browser.new_context(
                user_agent=self._config.user_agent,
                viewport={"width": self._config.viewport_width, "height": self._config.viewport_height},
                locale=self._config.locale,
                extra_http_headers=dict(self._config.extra_headers),
            )
            context.add_init_script(HIDE_WEBDRIVER_SCRIPT)
            page = context.new_page()
            page.route("**/*", self._block_heavy_resources)
        except (PlaywrightError, OSError) as exc:
            self._shutdown(playwright, browser)
            raise BrowserLaunchError(f"Failed to launch browser ({self._config.mode}): {exc}") from exc

        logger.info("Browser session acquired (mode=%s)", self._config.mode)
        self._handle = SessionHandle(playwright=playwright, browser=browser, context=context, page=page)
        return self._handle

    def release(self, handle: SessionHandle) -> None:
        if handle.released:
            return
        handle.released = True

        try:
            handle.page.close()
        except PlaywrightError as exc:
            logger.warning("Closing page failed: %s", exc)

        try:
            handle.context.close()
        except PlaywrightError as exc:
            logger.warning("Closing browser context failed: %s", exc)

        self._shutdown(handle.playwright, handle.browser)
        logger.info("Browser session released")

    def __enter__(self) -> SessionHandle:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._handle is not None:
            self.release(self._handle)
            self._handle = None

    def _launch_options(self) -> dict:
        if self._config.mode == "local":
            return {
                "executable_path": self._config.executable_path,
                "headless": self._config.headless,
                "args": LOCAL_ARGS + EVASION_ARGS,
            }
        return {"headless": True, "args": EVASION_ARGS}

    def _block_heavy_resources(self, route: Any) -> None:
        if route.request.resource_type in self._config.blocked_resource_types:
            route.abort()
        else:
            route.continue_()

    @staticmethod
    def _shutdown(playwright: Any, browser: Any) -> None:
        try:
            if browser is not None:
                browser.close()
        except PlaywrightError as exc:
            logger.warning("Closing browser failed: %s", exc)
        finally:
            if playwright is not None:
                playwright.stop()
