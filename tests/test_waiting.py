import pytest

from emoji_import.errors import WaitTimeout
from emoji_import.waiting import element_gone, element_visible, wait_until

from conftest import FakePage


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_returns_first_truthy_value():
    clock = FakeClock()
    answers = iter([None, 0, "", "found"])

    result = wait_until(lambda: next(answers), interval=0.5, timeout=10, sleep=clock.sleep, clock=clock)

    assert result == "found"
    assert clock.sleeps == [0.5, 0.5, 0.5]


def test_times_out_with_description():
    clock = FakeClock()

    with pytest.raises(WaitTimeout) as exc:
        wait_until(lambda: None, interval=0.5, timeout=2, sleep=clock.sleep, clock=clock, description="save button")

    assert "save button" in str(exc.value)
    assert clock.now >= 2


def test_none_timeout_keeps_polling():
    clock = FakeClock()
    calls = {"n": 0}

    def ready():
        calls["n"] += 1
        return calls["n"] > 1000

    assert wait_until(ready, interval=0.5, timeout=None, sleep=clock.sleep, clock=clock) is True
    assert clock.now == pytest.approx(500.0)


def test_predicate_errors_propagate():
    def boom():
        raise KeyError("x")

    with pytest.raises(KeyError):
        wait_until(boom, timeout=1, sleep=lambda s: None)


def test_visible_and_gone_checks():
    page = FakePage()
    assert element_visible(page, "#a")() is None
    assert element_gone(page, "#a")() is True

    el = page.add("#a", visible=False)
    assert element_visible(page, "#a")() is None
    assert element_gone(page, "#a")() is True

    el.visible = True
    assert element_visible(page, "#a")() is el
    assert element_gone(page, "#a")() is False
