from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

from .errors import WaitTimeout

T = TypeVar("T")


def wait_until(
    predicate: Callable[[], T],
    *,
    interval: float = 0.5,
    timeout: Optional[float] = 30.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    description: str = "condition",
) -> T:
    """
    Poll predicate() until it returns something truthy and return that value.
    timeout=None polls forever. Raises WaitTimeout once the deadline has passed.
    """
    deadline = None if timeout is None else clock() + max(0.0, timeout)
    while True:
        result = predicate()
        if result:
            return result
        if deadline is not None and clock() >= deadline:
            raise WaitTimeout(description, timeout or 0.0)
        sleep(interval)


def page_sleeper(page) -> Callable[[float], None]:
    # page.wait_for_timeout keeps Playwright's event loop pumping, time.sleep does not
    return lambda seconds: page.wait_for_timeout(seconds * 1000)


def element_present(page, selector: str):
    return lambda: page.query_selector(selector)


def element_visible(page, selector: str):
    def check():
        el = page.query_selector(selector)
        if el is not None and el.is_visible():
            return el
        return None

    return check


def element_gone(page, selector: str):
    def check() -> bool:
        el = page.query_selector(selector)
        return el is None or not el.is_visible()

    return check
