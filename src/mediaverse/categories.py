"""Normalization of free-text category values."""

from typing import Optional

from .constants import ItemCategory

# Checked in this order: board games before video games ("juego de mesa"
# contains "juego"), anime before series, series before movies.
CATEGORY_SYNONYMS: list[tuple[ItemCategory, tuple[str, ...]]] = [
    (ItemCategory.BOARDGAME, ("boardgame", "board game", "juego de mesa", "juegos de mesa", "mesa")),
    (ItemCategory.VIDEOGAME, ("videogame", "video game", "videojuego", "game", "juego", "consola")),
    (ItemCategory.ANIME, ("anime", "animación", "animacion")),
    (ItemCategory.SERIES, ("series", "serie", "tv")),
    (ItemCategory.MOVIE, ("movie", "película", "pelicula", "film", "cine")),
    (ItemCategory.BOOK, ("book", "libro", "lectura")),
]


def parse_category(raw: Optional[str]) -> Optional[ItemCategory]:
    """Map a free-text category to an ItemCategory, or None if unknown.

    Exact synonyms win; otherwise the first category whose synonym occurs
    inside the text is returned.
    """
    if raw is None:
        return None
    if isinstance(raw, ItemCategory):
        return raw
    text = str(raw).strip().lower()
    if not text:
        return None

    for category, synonyms in CATEGORY_SYNONYMS:
        if text == category.value or text in synonyms:
            return category

    for category, synonyms in CATEGORY_SYNONYMS:
        if any(s in text for s in synonyms):
            return category
    return None


def matches_category(raw: Optional[str], wanted: ItemCategory) -> bool:
    """Check whether a free-text category refers to the wanted category."""
    return parse_category(raw) == wanted
