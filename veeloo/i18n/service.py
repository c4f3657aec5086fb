"""JSON-file translations for bot replies."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class I18nService:
    def __init__(self, *, locales_path: str | Path | None = None, default_locale: str = "en") -> None:
        self.locales_path = Path(locales_path or Path(__file__).with_name("locales"))
        self.default_locale = default_locale
        self._tables: dict[str, dict[str, str]] = {}

    def gettext(self, key: str, *, locale: str | None = None, **kwargs: Any) -> str:
        for candidate in self._candidates(locale):
            text = self._load_locale(candidate).get(key)
            if text is not None:
                return text.format(**kwargs) if kwargs else text
        return key

    def _candidates(self, locale: str | None) -> list[str]:
        # "pt-BR" falls back to "pt", then to the default locale.
        loc = (locale or self.default_locale).lower().replace("_", "-")
        candidates = [loc]
        base = loc.split("-", 1)[0]
        if base != loc:
            candidates.append(base)
        if self.default_locale not in candidates:
            candidates.append(self.default_locale)
        return candidates

    def _load_locale(self, locale: str) -> dict[str, str]:
        if locale not in self._tables:
            file_path = self.locales_path / f"{locale}.json"
            if file_path.exists():
                with file_path.open("r", encoding="utf-8") as fp:
                    self._tables[locale] = json.load(fp)
            else:
                self._tables[locale] = {}
        return self._tables[locale]


__all__ = ["I18nService"]
