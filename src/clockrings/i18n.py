"""Simple two-language (en/ru) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "en": "World Clock Rings",
        "ru": "Кольца мировых часов",
    },
    "label_city": {
        "en": "Add a city",
        "ru": "Добавить город",
    },
    "label_time": {
        "en": "Time (UTC)",
        "ru": "Время (UTC)",
    },
    "btn_add": {
        "en": "Add",
        "ru": "Добавить",
    },
    "btn_remove": {
        "en": "Remove",
        "ru": "Удалить",
    },
    "btn_reset": {
        "en": "Reset to defaults",
        "ru": "Сбросить",
    },
    "col_code": {
        "en": "Code",
        "ru": "Код",
    },
    "col_city": {
        "en": "City",
        "ru": "Город",
    },
    "col_local_time": {
        "en": "Local time",
        "ru": "Местное время",
    },
    "col_orbit": {
        "en": "Ring",
        "ru": "Кольцо",
    },
    "orbit_1": {
        "en": "outer",
        "ru": "внешнее",
    },
    "orbit_2": {
        "en": "middle",
        "ru": "среднее",
    },
    "free_arc_summary": {
        "en": "Free space on the {ring} ring: {degrees:.0f}°",
        "ru": "Свободно на кольце «{ring}»: {degrees:.0f}°",
    },
    "empty_selection": {
        "en": "No cities selected yet",
        "ru": "Города не выбраны",
    },
    "conflict_both_orbits": {
        "en": "Cannot place {name} - both orbits are occupied",
        "ru": "Невозможно разместить {name}: обе орбиты заняты",
    },
    "error_unknown_zone": {
        "en": "Unknown time zone: {identifier}",
        "ru": "Неизвестный часовой пояс: {identifier}",
    },
    "error_duplicate": {
        "en": "{name} is already on the clock",
        "ru": "{name} уже есть на циферблате",
    },
    "error_conflict": {
        "en": "Adding {name} would overlap labels on both rings",
        "ru": "Если добавить {name}, подписи наложатся на обоих кольцах",
    },
    "error_config": {
        "en": "Invalid label settings: {error}",
        "ru": "Неверные настройки подписей: {error}",
    },
}


def t(key: str, lang: str, **kwargs: object) -> str:
    """Return the translated string for key in lang, formatted with kwargs.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    text = entry.get(lang) or entry.get("en") or key
    return text.format(**kwargs) if kwargs else text
