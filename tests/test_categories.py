"""Tests for free-text category normalization."""

import pytest
from mediaverse.categories import matches_category, parse_category
from mediaverse.constants import ItemCategory


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("movie", ItemCategory.MOVIE),
        ("Película", ItemCategory.MOVIE),
        ("Películas", ItemCategory.MOVIE),
        ("serie", ItemCategory.SERIES),
        ("Series", ItemCategory.SERIES),
        ("Anime", ItemCategory.ANIME),
        ("Libros", ItemCategory.BOOK),
        ("Videojuegos", ItemCategory.VIDEOGAME),
        ("Juegos de Mesa", ItemCategory.BOARDGAME),
        ("  boardgame ", ItemCategory.BOARDGAME),
    ],
)
def test_parse_category_synonyms(raw, expected):
    assert parse_category(raw) == expected


def test_parse_category_unknown():
    assert parse_category("podcast") is None
    assert parse_category("") is None
    assert parse_category(None) is None


def test_parse_category_passes_enum_through():
    assert parse_category(ItemCategory.ANIME) is ItemCategory.ANIME


def test_matches_category():
    assert matches_category("pelicula", ItemCategory.MOVIE)
    assert not matches_category("libro", ItemCategory.MOVIE)
