from src.preferences.application.context import PreferenceContext
from src.preferences.domain.models import Locale, Theme
from src.shared.telemetry import Telemetry


class PreferencesViewModel:
    """
    What the page needs to know about preferences, and the two things
    a visitor can do to them.
    """

    def __init__(self, context: PreferenceContext):
        self.context = context
        self.telemetry = Telemetry("PreferencesViewModel")

    # --- Properties ---
    @property
    def theme(self) -> Theme:
        return self.context.theme.value

    @property
    def locale(self) -> Locale:
        return self.context.locale.value

    @property
    def is_dark(self) -> bool:
        return self.context.theme.is_dark

    @property
    def follows_system(self) -> bool:
        return self.context.theme.follows_system

    @property
    def root_css_class(self) -> str:
        return "dark" if self.is_dark else ""

    @property
    def available_locales(self) -> list[Locale]:
        return list(Locale)

    # --- Actions (Traced) ---
    def toggle_theme(self) -> Theme:
        Telemetry.start_trace()
        theme = self.context.theme.toggle_preference()
        self.telemetry.log_info("Action: Toggle Theme", theme=theme.value)
        return theme

    def select_locale(self, locale: Locale | str) -> Locale:
        Telemetry.start_trace()
        if Locale.parse(locale) is self.locale:
            return self.locale
        selected = self.context.locale.set_preference(locale)
        self.telemetry.log_info("Action: Select Locale", locale=selected.value)
        return selected
