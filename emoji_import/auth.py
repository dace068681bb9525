from __future__ import annotations

import logging

from playwright.sync_api import Error as PlaywrightError

from .errors import AuthError, WaitTimeout
from .selectors import SELECTORS, customize_url
from .waiting import element_gone, element_present, element_visible, page_sleeper, wait_until

logger = logging.getLogger(__name__)

TYPE_DELAY_MS = 20
SETTLE_MS = 500
NAV_TIMEOUT_MS = 45000


def fill_field(page, selector: str, value: str) -> None:
    """Replace whatever the field holds with value. Slack pre-fills some inputs."""
    page.focus(selector)
    page.keyboard.press("Home")
    page.keyboard.down("Shift")
    page.keyboard.press("End")
    page.keyboard.up("Shift")
    page.keyboard.press("Backspace")
    page.keyboard.type(value, delay=TYPE_DELAY_MS)


def _goto(page, host: str) -> None:
    url = customize_url(host)
    logger.debug("goto: %s", url)
    try:
        page.goto(url, wait_until="domcontentloaded", timeout=NAV_TIMEOUT_MS)
    except PlaywrightError as e:
        raise AuthError(f"cannot open {url}: {e}") from e


def authenticate(
    page,
    host: str,
    email: str,
    password: str,
    *,
    timeout_ms: int = 30000,
    poll_interval_ms: int = 500,
) -> None:
    _goto(page, host)
    try:
        _sign_in(page, email, password, timeout_ms, poll_interval_ms)
    except PlaywrightError as e:
        # Slack navigates during sign-in; a destroyed execution context lands here
        raise AuthError(f"browser error during sign-in: {e}") from e
    logger.info("signed in to %s.slack.com", host)


def _sign_in(page, email: str, password: str, timeout_ms: int, poll_interval_ms: int) -> None:
    sel = SELECTORS["SIGNIN"]
    waits = dict(interval=poll_interval_ms / 1000.0, timeout=timeout_ms / 1000.0, sleep=page_sleeper(page))

    try:
        wait_until(element_visible(page, sel["email"]), description="sign-in form", **waits)
    except WaitTimeout as e:
        raise AuthError("form not found") from e

    page.wait_for_timeout(SETTLE_MS)
    fill_field(page, sel["email"], email)
    fill_field(page, sel["password"], password)
    submit = page.query_selector(sel["submit"])
    if submit is None:
        raise AuthError("form not found")
    submit.click()

    try:
        wait_until(element_gone(page, sel["email"]), description="sign-in form to close", **waits)
    except WaitTimeout as e:
        raise AuthError("login not confirmed") from e


def restore_session(page, host: str, *, timeout_ms: int = 30000, poll_interval_ms: int = 500) -> None:
    """Check that a context loaded from stored state lands on the emoji page, not the sign-in form."""
    _goto(page, host)
    try:
        wait_until(
            element_present(page, SELECTORS["EMOJI"]["add_button"]),
            interval=poll_interval_ms / 1000.0,
            timeout=timeout_ms / 1000.0,
            sleep=page_sleeper(page),
            description="emoji admin page",
        )
    except WaitTimeout as e:
        raise AuthError("stored session rejected") from e
    except PlaywrightError as e:
        raise AuthError(f"browser error while checking stored session: {e}") from e
    logger.info("reused stored session for %s.slack.com", host)
