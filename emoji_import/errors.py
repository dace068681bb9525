from __future__ import annotations

from typing import Any, Optional


class EmojiImportError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigError(EmojiImportError):
    pass


class ManifestError(EmojiImportError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class AuthError(EmojiImportError):
    def __init__(self, reason: str):
        super().__init__(f"AuthError: {reason}")
        self.reason = reason


class DownloadError(EmojiImportError):
    def __init__(self, url: str, cause: Any):
        super().__init__(f"DownloadError: {url}: {cause}")
        self.url = url
        self.cause = cause


class UploadError(EmojiImportError):
    def __init__(self, name: str, reason: str, state: Optional[Any] = None):
        where = f" (while {state.value})" if state is not None else ""
        super().__init__(f"UploadError: {name}: {reason}{where}")
        self.name = name
        self.reason = reason
        self.state = state


class WaitTimeout(EmojiImportError):
    """Raised by wait_until. Components translate it before it leaves them."""

    def __init__(self, description: str, timeout: float):
        super().__init__(f"timed out after {timeout:.1f}s waiting for {description}")
        self.description = description
        self.timeout = timeout
