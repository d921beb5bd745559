from enum import Enum
from typing import Any

from pydantic import BaseModel


# --- Enums ---
class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"

    @classmethod
    def parse(cls, raw: Any) -> "Theme | None":
        """Returns the member for a raw value, or None if it is not one."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None

    def complement(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK

    @property
    def icon(self) -> str:
        return "🌙" if self is Theme.DARK else "☀️"


class Locale(str, Enum):
    # Enum Member = BCP 47 tag
    ZH_CN = "zh-CN"
    EN_US = "en-US"

    @classmethod
    def parse(cls, raw: Any) -> "Locale | None":
        """Returns the member for a raw value, or None if it is not one."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None

    @classmethod
    def from_language_tag(cls, tag: str | None) -> "Locale":
        """
        Maps a browser or OS language tag onto a supported locale.
        Every Chinese variant (zh, zh-TW, zh_HK.UTF-8, ...) maps to zh-CN,
        anything else to en-US.
        """
        if tag and tag.strip().lower().startswith("zh"):
            return cls.ZH_CN
        return cls.EN_US

    @property
    def label(self) -> str:
        return "简体中文" if self is Locale.ZH_CN else "English"


# --- Read models ---
class PreferenceSnapshot(BaseModel):
    """
    Point-in-time view of one preference kind, safe to hand to consumers.
    """

    kind: str
    value: str
    follows_system: bool
    initialized: bool
