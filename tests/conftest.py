"""Fake Playwright page that models just enough of Slack's emoji admin UI for the tests."""

import os
from typing import Callable, Dict, List, Optional, Set

import pytest

from emoji_import.selectors import SELECTORS

SIGNIN = SELECTORS["SIGNIN"]
EMOJI = SELECTORS["EMOJI"]


class FakeElement:
    def __init__(self, selector: str, visible: bool = True, value: str = "", on_click: Optional[Callable] = None):
        self.selector = selector
        self.visible = visible
        self.value = value
        self.on_click = on_click
        self.files: List[str] = []
        self.clicks = 0

    def is_visible(self) -> bool:
        return self.visible

    def click(self) -> None:
        self.clicks += 1
        if self.on_click is not None:
            self.on_click(self)

    def set_input_files(self, path: str) -> None:
        # like Playwright, fail on the client side before anything reaches the page
        os.stat(path)
        self.files.append(path)


class FakeKeyboard:
    """Single-line text editing: Home, Shift+End selection, Backspace, typing."""

    def __init__(self, page: "FakePage"):
        self.page = page
        self.cursor = 0
        self.anchor: Optional[int] = None
        self.shift = False
        self.log: List[str] = []

    def _field(self) -> FakeElement:
        el = self.page.focused
        assert el is not None, "typing without focus"
        return el

    def down(self, key: str) -> None:
        self.log.append(f"down:{key}")
        if key == "Shift":
            self.shift = True

    def up(self, key: str) -> None:
        self.log.append(f"up:{key}")
        if key == "Shift":
            self.shift = False

    def press(self, key: str) -> None:
        self.log.append(key)
        el = self._field()
        if key in ("Home", "End"):
            target = 0 if key == "Home" else len(el.value)
            if self.shift:
                if self.anchor is None:
                    self.anchor = self.cursor
            else:
                self.anchor = None
            self.cursor = target
        elif key == "Backspace":
            if self.anchor is not None and self.anchor != self.cursor:
                lo, hi = sorted((self.anchor, self.cursor))
                el.value = el.value[:lo] + el.value[hi:]
                self.cursor = lo
            elif self.cursor > 0:
                el.value = el.value[: self.cursor - 1] + el.value[self.cursor:]
                self.cursor -= 1
            self.anchor = None

    def type(self, text: str, delay: float = 0) -> None:
        self.log.append(f"type:{text}")
        el = self._field()
        el.value = el.value[: self.cursor] + text + el.value[self.cursor:]
        self.cursor += len(text)
        self.anchor = None


class FakeContext:
    def __init__(self):
        self.saved_states: List[str] = []

    def storage_state(self, path: str) -> None:
        self.saved_states.append(path)


class FakePage:
    def __init__(self):
        self.elements: Dict[str, FakeElement] = {}
        self.keyboard = FakeKeyboard(self)
        self.context = FakeContext()
        self.focused: Optional[FakeElement] = None
        self.visited: List[str] = []
        self.waited_ms: List[float] = []
        self.on_goto: Optional[Callable[["FakePage", str], None]] = None
        self.on_query: Optional[Callable[["FakePage", str], None]] = None

    def add(self, selector: str, **kwargs) -> FakeElement:
        el = FakeElement(selector, **kwargs)
        self.elements[selector] = el
        return el

    def remove(self, *selectors: str) -> None:
        for sel in selectors:
            self.elements.pop(sel, None)

    def goto(self, url: str, **kwargs) -> None:
        self.visited.append(url)
        if self.on_goto is not None:
            self.on_goto(self, url)

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        if self.on_query is not None:
            self.on_query(self, selector)
        return self.elements.get(selector)

    def focus(self, selector: str) -> None:
        self.focused = self.elements[selector]
        self.keyboard.cursor = len(self.focused.value)
        self.keyboard.anchor = None

    def wait_for_timeout(self, ms: float) -> None:
        self.waited_ms.append(ms)

    def screenshot(self, path: str, full_page: bool = False) -> None:
        with open(path, "wb") as f:
            f.write(b"PNG")

    def content(self) -> str:
        return "<html><body>fake</body></html>"


class FakeSlack:
    """
    Wires a FakePage so that signing in reveals the emoji admin and each add/save cycle
    records an uploaded emoji.
    """

    def __init__(
        self,
        email: str = "me@example.com",
        password: str = "hunter2",
        stuck_names: Set[str] = frozenset(),
        show_form: bool = True,
        prefill_email: str = "",
    ):
        self.page = FakePage()
        self.email = email
        self.password = password
        self.stuck_names = set(stuck_names)
        self.show_form = show_form
        self.prefill_email = prefill_email
        self.uploaded: List[tuple] = []
        self.page.on_goto = self._on_goto

    def _on_goto(self, page: FakePage, url: str) -> None:
        if self.show_form:
            page.add(SIGNIN["email"], value=self.prefill_email)
            page.add(SIGNIN["password"])
            page.add(SIGNIN["submit"], on_click=self._submit)

    def _submit(self, _el) -> None:
        email = self.page.elements[SIGNIN["email"]].value
        password = self.page.elements[SIGNIN["password"]].value
        if email == self.email and password == self.password:
            self.page.remove(SIGNIN["email"], SIGNIN["password"], SIGNIN["submit"])
            self.show_admin()

    def show_admin(self) -> None:
        self.page.add(EMOJI["add_button"], on_click=self._open_dialog)

    def _open_dialog(self, _el) -> None:
        self.page.add(EMOJI["file_input"])
        self.page.add(EMOJI["name"])
        self.page.add(EMOJI["save_button"], on_click=self._save)

    def _save(self, _el) -> None:
        name = self.page.elements[EMOJI["name"]].value
        files = self.page.elements[EMOJI["file_input"]].files
        if name in self.stuck_names:
            return
        self.uploaded.append((name, files[-1] if files else None))
        self.page.remove(EMOJI["file_input"], EMOJI["name"], EMOJI["save_button"])


@pytest.fixture
def slack():
    return FakeSlack()


@pytest.fixture
def image(tmp_path):
    """Create a small image file on disk and return its path."""

    def make(name: str, ext: str = ".png") -> str:
        path = tmp_path / f"{name}{ext}"
        path.write_bytes(b"\x89PNG\r\n\x1a\n")
        return str(path)

    return make
