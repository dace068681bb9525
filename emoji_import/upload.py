from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError

from .auth import fill_field
from .errors import UploadError, WaitTimeout
from .selectors import SELECTORS
from .waiting import element_gone, element_present, page_sleeper, wait_until

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    AWAITING_ADD_BUTTON = "awaiting add button"
    CLICKED = "clicked add button"
    AWAITING_FILE_INPUT = "awaiting file input"
    FILE_SET = "file set"
    AWAITING_NAME_FIELD = "awaiting name field"
    NAME_SET = "name set"
    AWAITING_SAVE_BUTTON = "awaiting save button"
    SUBMITTED = "submitted"
    AWAITING_DIALOG_CLOSE = "awaiting dialog close"
    DONE = "done"


STATE_ORDER = list(UploadState)


class UploadDriver:
    """
    Pushes one emoji at a time through Slack's add-emoji dialog.

    Each call to upload_one walks the states in STATE_ORDER and records them in .trace;
    a step can only be entered from its predecessor.
    """

    def __init__(
        self,
        page,
        *,
        timeout_ms: int = 30000,
        add_button_timeout_ms: int = 120000,
        poll_interval_ms: int = 500,
    ):
        self.page = page
        self.timeout = timeout_ms / 1000.0
        # 0 keeps polling until the button shows up
        self.add_button_timeout: Optional[float] = add_button_timeout_ms / 1000.0 if add_button_timeout_ms else None
        self.interval = poll_interval_ms / 1000.0
        self.state: Optional[UploadState] = None
        self.trace: List[UploadState] = []
        self._name = ""

    def _advance(self, state: UploadState) -> None:
        if self.state is None:
            expected = UploadState.AWAITING_ADD_BUTTON
        elif self.state is UploadState.DONE:
            expected = None
        else:
            expected = STATE_ORDER[STATE_ORDER.index(self.state) + 1]
        if state is not expected:
            raise RuntimeError(f"illegal upload transition {self.state} -> {state}")
        self.state = state
        self.trace.append(state)

    def _wait(self, predicate, what: str, timeout: Optional[float], reason: Optional[str] = None):
        try:
            return wait_until(
                predicate,
                interval=self.interval,
                timeout=timeout,
                sleep=page_sleeper(self.page),
                description=what,
            )
        except WaitTimeout as e:
            raise UploadError(self._name, reason or f"{what} not found", self.state) from e

    def upload_one(self, local_path: str, name: str) -> None:
        self.state = None
        self.trace = []
        self._name = name
        try:
            self._run(local_path, name)
        except PlaywrightError as e:
            raise UploadError(name, f"browser error: {e}", self.state) from e

    def _run(self, local_path: str, name: str) -> None:
        sel = SELECTORS["EMOJI"]

        self._advance(UploadState.AWAITING_ADD_BUTTON)
        self._wait(element_present(self.page, sel["add_button"]), "add button", self.add_button_timeout)
        # Slack re-renders the list after every save; the button can vanish between poll and click
        button = self.page.query_selector(sel["add_button"])
        if button is None:
            raise UploadError(name, "control disappeared", self.state)
        button.click()
        self._advance(UploadState.CLICKED)

        self._advance(UploadState.AWAITING_FILE_INPUT)
        file_input = self._wait(element_present(self.page, sel["file_input"]), "file input", self.timeout)
        try:
            # Playwright stats and reads the file client-side before sending it
            file_input.set_input_files(local_path)
        except OSError as e:
            raise UploadError(name, f"cannot read {local_path}: {e.strerror or e}", self.state) from e
        self._advance(UploadState.FILE_SET)

        self._advance(UploadState.AWAITING_NAME_FIELD)
        self._wait(element_present(self.page, sel["name"]), "name field", self.timeout)
        fill_field(self.page, sel["name"], name)
        self._advance(UploadState.NAME_SET)

        self._advance(UploadState.AWAITING_SAVE_BUTTON)
        save = self._wait(element_present(self.page, sel["save_button"]), "save button", self.timeout)
        save.click()
        self._advance(UploadState.SUBMITTED)

        self._advance(UploadState.AWAITING_DIALOG_CLOSE)
        self._wait(element_gone(self.page, sel["save_button"]), "dialog close", self.timeout, reason="save not confirmed")
        self._advance(UploadState.DONE)
        logger.debug("upload flow for %s: %s", name, " -> ".join(s.value for s in self.trace))
