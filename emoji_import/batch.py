from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from .assets import ResolvedAsset, resolve
from .auth import authenticate, restore_session
from .browser import capture_debug, open_session, save_storage_state
from .config import UserInput
from .errors import AuthError, DownloadError, EmojiImportError, UploadError
from .manifest import EmojiPack, EmojiRequest
from .upload import UploadDriver
from .waiting import page_sleeper

logger = logging.getLogger(__name__)


@dataclass
class ItemOutcome:
    index: int
    name: str
    src: str
    ok: bool
    error: Optional[EmojiImportError] = None

    def describe(self) -> str:
        if self.ok:
            return f"{self.name}: uploaded"
        return f"{self.name} ({self.src}): {self.error}"


@dataclass
class BatchReport:
    title: str
    total: int
    outcomes: List[ItemOutcome] = field(default_factory=list)
    aborted: bool = False
    auth_error: Optional[AuthError] = None

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def uploaded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return self.auth_error is None and not self.failed and self.attempted == self.total

    @property
    def status(self) -> str:
        if self.auth_error is not None:
            return "auth_failed"
        if self.aborted:
            return "aborted"
        if self.failed:
            return "partial"
        return "done"

    def summary(self) -> str:
        if self.auth_error is not None:
            return f"Login failed ({self.auth_error.reason}); uploaded 0 emojis."
        lines = [f"Uploaded {self.uploaded} emojis."]
        if self.failed:
            lines.append(f"{len(self.failed)} failed:")
            lines.extend(f"  - {o.describe()}" for o in self.failed)
        skipped = self.total - self.attempted
        if self.aborted and skipped:
            lines.append(f"Stopped after first failure; {skipped} not attempted.")
        return "\n".join(lines)


def _sign_in(page: Any, config: UserInput, authenticator: Callable[..., None]) -> None:
    waits = dict(timeout_ms=config.wait_timeout_ms, poll_interval_ms=config.poll_interval_ms)
    if config.storage_state and Path(config.storage_state).is_file():
        try:
            restore_session(page, config.host, **waits)
            return
        except AuthError as e:
            if not (config.email and config.password):
                raise
            logger.warning("%s; falling back to password login", e)

    logger.info("logging in...")
    authenticator(page, config.host, config.email, config.password, **waits)
    if config.save_storage_state and config.storage_state:
        save_storage_state(page, config.storage_state)


def _process(
    index: int,
    total: int,
    emoji: EmojiRequest,
    driver: UploadDriver,
    resolver: Callable[[EmojiRequest], ResolvedAsset],
) -> ItemOutcome:
    logger.info("[%d/%d] %s", index + 1, total, emoji.name)
    asset: Optional[ResolvedAsset] = None
    try:
        asset = resolver(emoji)
        logger.info("uploading %s...", emoji.name)
        driver.upload_one(asset.local_path, emoji.name)
    except (DownloadError, UploadError) as e:
        logger.error("failed %s (%s): %s", emoji.name, emoji.src, e)
        return ItemOutcome(index=index, name=emoji.name, src=emoji.src, ok=False, error=e)
    finally:
        if asset is not None:
            asset.cleanup()
    logger.info("uploaded  %s.", emoji.name)
    return ItemOutcome(index=index, name=emoji.name, src=emoji.src, ok=True)


def run(
    config: UserInput,
    pack: EmojiPack,
    *,
    session_factory: Callable[[UserInput], Any] = open_session,
    authenticator: Callable[..., None] = authenticate,
    resolver: Callable[[EmojiRequest], ResolvedAsset] = resolve,
    driver_factory: Callable[..., UploadDriver] = UploadDriver,
    sleep: Optional[Callable[[float], None]] = None,
    recorder: Any = None,
) -> BatchReport:
    """
    Sign in once, then push every emoji of the pack through the upload dialog in manifest order.

    Item failures never unwind past this function: each becomes an ItemOutcome and
    config.on_error decides whether the loop keeps going. AuthError ends the run before
    any upload. The browser session is released on every path.
    """
    report = BatchReport(title=pack.title, total=len(pack.emojis))
    if recorder is not None:
        recorder.start(pack.title, config.host, config.yaml)

    try:
        with session_factory(config) as page:
            try:
                _sign_in(page, config, authenticator)
            except AuthError as e:
                logger.error("%s", e)
                report.auth_error = e
            else:
                _upload_all(page, config, pack, report, resolver, driver_factory, sleep, recorder)
    except Exception as exc:
        if recorder is not None:
            recorder.finish(report, message=f"{type(exc).__name__}: {exc}")
        raise

    if recorder is not None:
        recorder.finish(report)
    return report


def _upload_all(page, config, pack, report, resolver, driver_factory, sleep, recorder) -> None:
    pause = sleep or page_sleeper(page)
    driver = driver_factory(
        page,
        timeout_ms=config.wait_timeout_ms,
        add_button_timeout_ms=config.add_button_timeout_ms,
        poll_interval_ms=config.poll_interval_ms,
    )
    for index, emoji in enumerate(pack.emojis):
        outcome = _process(index, report.total, emoji, driver, resolver)
        report.outcomes.append(outcome)
        if recorder is not None:
            recorder.item(outcome)
        if not outcome.ok:
            capture_debug(page, config.debug_dir, f"{index:03d}_{emoji.name}")
            if config.on_error == "abort":
                report.aborted = True
                break
        # let the emoji list re-render before the next dialog
        pause(config.throttle_ms / 1000.0)
