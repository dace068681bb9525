from __future__ import annotations

import asyncio
import logging
import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from playwright.sync_api import sync_playwright

from .config import UserInput
from .selectors import customize_url

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1200, "height": 1000}


def _close_quietly(resource: Any) -> None:
    if resource is None:
        return
    try:
        resource.close()
    except Exception as e:
        logger.debug("ignoring error while closing %s: %s", type(resource).__name__, e)


def _launch_browser(playwright: Any, *, headful: bool, channel: str = "", slowmo_ms: int = 0):
    launch_kwargs = {
        "headless": not headful,
        "slow_mo": slowmo_ms if headful else 0,
    }
    channel = (channel or "").strip()
    if channel:
        try:
            return playwright.chromium.launch(channel=channel, **launch_kwargs)
        except Exception as e:
            logger.warning("browser channel %r failed to launch (%s); using bundled chromium", channel, e)
    return playwright.chromium.launch(**launch_kwargs)


@contextmanager
def open_session(config: UserInput) -> Iterator[Any]:
    """
    Yield a page in a fresh isolated browser context.
    Page, context and browser are closed on every exit path.
    """
    with sync_playwright() as p:
        logger.info("launching browser...")
        browser = _launch_browser(p, headful=config.show, channel=config.browser_channel)
        context = page = None
        try:
            ctx_kwargs: Dict[str, Any] = {"viewport": dict(VIEWPORT)}
            if config.storage_state and Path(config.storage_state).is_file():
                ctx_kwargs["storage_state"] = config.storage_state
            logger.info("creating an isolated browser context...")
            context = browser.new_context(**ctx_kwargs)
            page = context.new_page()
            yield page
        finally:
            _close_quietly(page)
            _close_quietly(context)
            _close_quietly(browser)


def save_storage_state(page: Any, path: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    page.context.storage_state(path=str(target))
    logger.info("saved session state to %s", target)


_LABEL_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def capture_debug(page: Any, debug_dir: str, label: str) -> Optional[Path]:
    """Screenshot + HTML dump of the current page. Never raises."""
    if not debug_dir:
        return None
    out_dir = Path(debug_dir)
    safe = _LABEL_RE.sub("_", label).strip("_") or "page"
    shot = out_dir / f"{safe}.png"
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        page.screenshot(path=str(shot), full_page=True)
        (out_dir / f"{safe}.html").write_text(page.content(), encoding="utf-8")
    except Exception as e:
        logger.warning("could not capture debug artifacts for %s: %s", label, e)
        return None
    return shot


def init_session(host: str, state_path: str, slowmo_ms: int = 250, channel: str = "") -> None:
    """Human-in-the-loop sign-in (SSO, 2FA) that saves the session for later runs."""
    if not (host or "").strip():
        raise ValueError("A Slack host is required")

    path = Path(state_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with sync_playwright() as p:
        browser = _launch_browser(p, headful=True, channel=channel, slowmo_ms=max(0, int(slowmo_ms or 0)))
        context = browser.new_context(viewport=dict(VIEWPORT))
        try:
            page = context.new_page()
            page.goto(customize_url(host), wait_until="domcontentloaded", timeout=45000)

            # user signs in in the visible window, then resumes from the inspector
            page.pause()

            context.storage_state(path=str(path))
            logger.info("saved session state to %s", path)
        finally:
            _close_quietly(context)
            _close_quietly(browser)
