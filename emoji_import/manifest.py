from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Tuple

import yaml

from .errors import ManifestError


@dataclass(frozen=True)
class EmojiRequest:
    name: str
    src: str


@dataclass(frozen=True)
class EmojiPack:
    title: str
    emojis: Tuple[EmojiRequest, ...]

    def __len__(self) -> int:
        return len(self.emojis)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_emoji_pack(data: Any, source: str = "<manifest>", default_title: str = "") -> EmojiPack:
    if not isinstance(data, dict):
        raise ManifestError(source, "top level must be a mapping with 'title' and 'emojis'")

    raw_emojis = data.get("emojis")
    if not isinstance(raw_emojis, list):
        raise ManifestError(source, "'emojis' must be a list")

    emojis = []
    for idx, entry in enumerate(raw_emojis):
        if not isinstance(entry, dict):
            raise ManifestError(source, f"emojis[{idx}] must be a mapping")
        name = _text(entry.get("name"))
        src = _text(entry.get("src"))
        if not name:
            raise ManifestError(source, f"emojis[{idx}] has no name")
        if not src:
            raise ManifestError(source, f"emojis[{idx}] ({name}) has no src")
        # emojipacks manifests may carry 'aliases'; the admin form has no field for them
        emojis.append(EmojiRequest(name=name, src=src))

    title = _text(data.get("title")) or default_title
    return EmojiPack(title=title, emojis=tuple(emojis))


def load_emoji_pack(path: str) -> EmojiPack:
    p = Path(path).expanduser()
    try:
        content = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(str(p), f"cannot read file ({e.strerror or e})") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ManifestError(str(p), f"invalid YAML: {e}") from e

    return parse_emoji_pack(data, source=str(p), default_title=p.stem)
