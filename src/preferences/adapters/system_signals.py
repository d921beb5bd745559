"""
System-signal observers: where "what does the platform prefer?" comes from.

Every signal degrades to a fixed fallback (light / en-US) when the platform
capability is missing or misbehaves. Theme signals are also watchable; their
change notifications are delivered synchronously from poll(), which the host
calls at a point of its choosing (e.g. once per Streamlit rerun).
"""

import os
import subprocess
import sys
from abc import abstractmethod
from collections.abc import Callable, Mapping
from typing import TypeVar

import streamlit as st

from src.config import PreferenceConfig
from src.preferences.domain.models import Locale, Theme
from src.preferences.domain.ports import ISystemSignal, IWatchableSignal, Unsubscribe
from src.shared.telemetry import Telemetry

T = TypeVar("T")

_WIN_PERSONALIZE_KEY = r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"


class SystemSignal(ISystemSignal[T]):
    def __init__(self, fallback: T, name: str) -> None:
        self.fallback = fallback
        self.telemetry = Telemetry(name)
        self._warned = False

    @abstractmethod
    def _read(self) -> T | None:
        """Raw platform read. None means the capability is unavailable."""
        pass

    def current_value(self) -> T:
        try:
            value = self._read()
        except Exception as e:
            self._warn_fallback(e)
            return self.fallback

        if value is None:
            self._warn_fallback(None)
            return self.fallback
        return value

    def _warn_fallback(self, error: Exception | None) -> None:
        if self._warned:
            return
        self._warned = True
        self.telemetry.log_warning(
            "System signal unavailable, using fallback",
            error,
            fallback=getattr(self.fallback, "value", self.fallback),
        )


class PolledSignal(SystemSignal[T], IWatchableSignal[T]):
    def __init__(self, fallback: T, name: str) -> None:
        super().__init__(fallback, name)
        self._listeners: list[Callable[[T], None]] = []
        self._last_seen: T | None = None

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def current_value(self) -> T:
        value = super().current_value()
        self._last_seen = value
        return value

    def subscribe(self, on_change: Callable[[T], None]) -> Unsubscribe:
        self._listeners.append(on_change)

        def unsubscribe() -> None:
            if on_change in self._listeners:
                self._listeners.remove(on_change)

        return unsubscribe

    def poll(self) -> bool:
        """
        Re-reads the signal and notifies subscribers if it moved since the
        last read. Returns True if a change was delivered.
        """
        previous = self._last_seen
        value = self.current_value()
        if previous is None or value == previous:
            return False

        self.telemetry.log_info(
            "System signal changed",
            previous=getattr(previous, "value", previous),
            current=getattr(value, "value", value),
        )
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                self.telemetry.log_error("Signal listener failed", e)
        return True


# --- Theme ---
class StreamlitThemeSignal(PolledSignal[Theme]):
    """The visitor's browser theme as reported by st.context."""

    def __init__(self) -> None:
        super().__init__(Theme(PreferenceConfig.FALLBACK_THEME), "StreamlitThemeSignal")

    def _read(self) -> Theme | None:
        context_theme = getattr(st.context, "theme", None)
        return Theme.parse(getattr(context_theme, "type", None))


class OsThemeSignal(PolledSignal[Theme]):
    """Dark-mode preference of the machine running the app."""

    def __init__(self) -> None:
        super().__init__(Theme(PreferenceConfig.FALLBACK_THEME), "OsThemeSignal")

    def _read(self) -> Theme | None:
        if sys.platform.startswith("win"):
            import winreg

            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, _WIN_PERSONALIZE_KEY) as key:
                # 0 = dark, 1 = light
                value, _ = winreg.QueryValueEx(key, "AppsUseLightTheme")
                return Theme.LIGHT if int(value) == 1 else Theme.DARK

        if sys.platform == "darwin":
            result = subprocess.run(
                ["defaults", "read", "-g", "AppleInterfaceStyle"],
                capture_output=True,
                text=True,
                timeout=2,
            )
            # The key only exists in dark mode
            return Theme.DARK if result.stdout.strip().lower() == "dark" else Theme.LIGHT

        gtk_theme = os.environ.get("GTK_THEME")
        if gtk_theme:
            return Theme.DARK if "dark" in gtk_theme.lower() else Theme.LIGHT
        return None


class ManualThemeSignal(PolledSignal[Theme]):
    """Signal whose value is pushed by the host (embedding apps, tests)."""

    def __init__(self, value: Theme | None = None) -> None:
        super().__init__(Theme(PreferenceConfig.FALLBACK_THEME), "ManualThemeSignal")
        self._value = value

    def _read(self) -> Theme | None:
        return self._value

    def set_value(self, value: Theme | None) -> bool:
        self._value = value
        return self.poll()


# --- Locale ---
class StreamlitLocaleSignal(SystemSignal[Locale]):
    """Preferred language of the visitor's browser."""

    def __init__(self) -> None:
        super().__init__(Locale(PreferenceConfig.FALLBACK_LOCALE), "StreamlitLocaleSignal")

    def _read(self) -> Locale | None:
        tag = getattr(st.context, "locale", None)
        if not tag:
            return None
        return Locale.from_language_tag(tag)


class EnvLocaleSignal(SystemSignal[Locale]):
    """Language of the host process, from the POSIX locale variables."""

    ENV_KEYS = ("LC_ALL", "LC_MESSAGES", "LANG", "LANGUAGE")

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        super().__init__(Locale(PreferenceConfig.FALLBACK_LOCALE), "EnvLocaleSignal")
        self._environ = environ

    def _read(self) -> Locale | None:
        environ = self._environ if self._environ is not None else os.environ
        for key in self.ENV_KEYS:
            tag = environ.get(key)
            if tag and tag not in ("C", "POSIX"):
                return Locale.from_language_tag(tag)
        return None


class ManualLocaleSignal(SystemSignal[Locale]):
    def __init__(self, value: Locale | None = None) -> None:
        super().__init__(Locale(PreferenceConfig.FALLBACK_LOCALE), "ManualLocaleSignal")
        self._value = value

    def _read(self) -> Locale | None:
        return self._value

    def set_value(self, value: Locale | None) -> None:
        self._value = value
