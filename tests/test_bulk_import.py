"""Tests for the bulk import pipeline."""

import io
from unittest.mock import MagicMock

import pandas as pd
import pytest
import requests
from mediaverse.bulk_import import PARSE_ERROR_MESSAGE, BulkImporter, build_template, map_status
from mediaverse.constants import ItemStatus, MatchConfidence
from mediaverse.exceptions import ConfigurationError
from mediaverse.google_books_client import GoogleBooksClient
from mediaverse.models import ImportedRow
from mediaverse.rate_limit import FixedDelayLimiter
from mediaverse.rawg_client import RawgClient
from mediaverse.tmdb_client import TMDBClient

MATRIX_CSV = b"Titulo,Estado,Nota\nMatrix,Completado,5\n"


def _importer(tmdb=None, books=None, rawg=None, **kwargs):
    return BulkImporter(
        tmdb or TMDBClient("key", session=MagicMock()),
        books or GoogleBooksClient(session=MagicMock()),
        rawg or RawgClient("key", session=MagicMock()),
        limiter=FixedDelayLimiter(0),
        **kwargs,
    )


def test_import_matched_movie(fake_http):
    """A matched row is found with high confidence and the provider's rating."""
    http = fake_http(
        {"results": [{"id": 603, "title": "Matrix", "vote_average": 8.2}]},
        {"id": 603, "title": "Matrix", "vote_average": 8.2, "runtime": 136, "overview": "Neo."},
    )
    importer = _importer(tmdb=TMDBClient("key", session=http))

    results = importer.parse_and_enrich("peliculas.csv", "movie", content=MATRIX_CSV)

    assert len(results) == 1
    result = results[0]
    assert result.found is True
    assert result.match_confidence == MatchConfidence.HIGH
    assert result.status == ItemStatus.COMPLETED
    assert result.rating == 4
    assert result.duration == 136
    assert result.original_title == "Matrix"
    assert importer.progress == 100
    assert importer.is_processing is False
    assert importer.items == results


def test_import_keeps_row_note_without_provider_rating(fake_http):
    http = fake_http({"results": [{"id": 603, "title": "Matrix"}]}, {"id": 603, "title": "Matrix"})
    importer = _importer(tmdb=TMDBClient("key", session=http))

    result = importer.parse_and_enrich("peliculas.csv", "movie", content=MATRIX_CSV)[0]

    assert result.found is True
    assert result.rating == 5


def test_import_without_key_aborts_before_requests(fake_http):
    http = fake_http()
    importer = _importer(tmdb=TMDBClient(None, session=http))

    with pytest.raises(ConfigurationError):
        importer.parse_and_enrich("peliculas.csv", "movie", content=MATRIX_CSV)

    http.get.assert_not_called()
    assert importer.error is not None
    assert importer.items == []


def test_import_search_only_match_is_low_confidence(fake_http):
    http = fake_http(
        {"results": [{"id": 603, "title": "The Matrix", "overview": "From search"}]},
        requests.ConnectionError("details down"),
    )
    importer = _importer(tmdb=TMDBClient("key", session=http))

    result = importer.parse_and_enrich("peliculas.csv", "movie", content=MATRIX_CSV)[0]

    assert result.found is True
    assert result.match_confidence == MatchConfidence.LOW
    assert result.title == "The Matrix"
    assert result.description == "From search"


def test_import_unmatched_row_keeps_defaults(fake_http):
    http = fake_http({"results": []})
    importer = _importer(tmdb=TMDBClient("key", session=http))

    result = importer.parse_and_enrich("peliculas.csv", "movie", content=MATRIX_CSV)[0]

    assert result.found is False
    assert result.match_confidence == MatchConfidence.NONE
    assert result.title == "Matrix"
    assert result.rating == 5
    assert result.status == ItemStatus.COMPLETED


def test_import_books_without_key(fake_http):
    http = fake_http({"items": [{"volumeInfo": {"title": "Dune", "authors": ["Frank Herbert"]}}]})
    importer = _importer(books=GoogleBooksClient(None, session=http))

    results = importer.parse_and_enrich("libros.csv", "book", content=b"Titulo,Estado,Nota\ndune,leyendo,\n")

    assert results[0].found is True
    assert results[0].author == "Frank Herbert"
    assert results[0].status == ItemStatus.IN_PROGRESS
    assert results[0].rating is None


def test_import_boardgames_has_no_provider():
    importer = _importer()

    results = importer.parse_and_enrich("mesa.csv", "boardgame", content=b"Titulo,Estado,Nota\nCatan,,3\n")

    assert results[0].found is False
    assert results[0].rating == 3
    assert results[0].status == ItemStatus.PENDING


def test_progress_reaches_100_in_order(fake_http):
    http = fake_http({"results": []}, {"results": []}, {"results": []})
    progress = []
    sleep = MagicMock()
    importer = BulkImporter(
        TMDBClient("key", session=MagicMock()),
        GoogleBooksClient(session=MagicMock()),
        RawgClient("key", session=http),
        limiter=FixedDelayLimiter(0.2, sleep=sleep),
        on_progress=progress.append,
    )
    content = b"Titulo,Estado,Nota\nHades,jugando,\nCeleste,terminado,5\nTunic,,\n"

    results = importer.parse_and_enrich("juegos.csv", "videogame", content=content)

    assert [r.original_title for r in results] == ["Hades", "Celeste", "Tunic"]
    assert progress == [33, 67, 100]
    assert sleep.call_count == 3


def test_out_of_range_and_text_notes_are_ignored():
    importer = _importer()
    content = b"Titulo,Estado,Nota\nA,,9\nB,,muy buena\nC,,4.5\n"

    results = importer.parse_and_enrich("mesa.csv", "boardgame", content=content)

    assert [r.rating for r in results] == [None, None, 4.5]


def test_parse_file_skips_blank_titles():
    importer = _importer()

    rows = importer.parse_file("x.csv", b"Titulo,Estado,Nota\n,Completado,5\n  ,,\nDune,,\n")

    assert rows == [ImportedRow(title="Dune")]


def test_parse_file_header_only():
    assert _importer().parse_file("x.csv", b"Titulo,Estado,Nota\n") == []


def test_parse_file_empty():
    importer = _importer()
    assert importer.parse_file("x.csv", b"") == []
    assert importer.error is None


def test_parse_file_ignores_extra_columns():
    """A row wider than the header still parses; cells past the third are dropped."""
    rows = _importer().parse_file("x.csv", b"Titulo,Estado,Nota\nMatrix,Completado,5,extra\nDune,,\n")

    assert rows == [
        ImportedRow(title="Matrix", status_text="Completado", note=5),
        ImportedRow(title="Dune"),
    ]


def test_parse_file_header_narrower_than_rows():
    importer = _importer()

    rows = importer.parse_file("x.csv", b"Titulo\nMatrix,Completado,5\n")

    assert rows == [ImportedRow(title="Matrix", status_text="Completado", note=5)]
    assert importer.error is None


def test_parse_file_latin1():
    content = "Titulo,Estado,Nota\nAmélie,Visto,5\n".encode("latin-1")

    rows = _importer().parse_file("x.csv", content)

    assert rows == [ImportedRow(title="Amélie", status_text="Visto", note=5)]


def test_parse_file_reads_from_disk(tmp_path):
    source = tmp_path / "peliculas.csv"
    source.write_bytes(MATRIX_CSV)

    assert _importer().parse_file(str(source)) == [ImportedRow(title="Matrix", status_text="Completado", note=5)]


def test_parse_file_malformed_spreadsheet():
    importer = _importer()

    rows = importer.parse_file("broken.xlsx", b"this is not a spreadsheet")

    assert rows == []
    assert importer.error == PARSE_ERROR_MESSAGE


def test_parse_file_xlsx():
    buffer = io.BytesIO()
    pd.DataFrame([["Titulo", "Estado", "Nota"], ["Matrix", "Visto", 5], ["Dune", None, None]]).to_excel(
        buffer, header=False, index=False
    )

    rows = _importer().parse_file("import.xlsx", buffer.getvalue())

    assert rows == [
        ImportedRow(title="Matrix", status_text="Visto", note=5),
        ImportedRow(title="Dune"),
    ]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Viendo", ItemStatus.IN_PROGRESS),
        ("en progreso", ItemStatus.IN_PROGRESS),
        ("Leyendo", ItemStatus.IN_PROGRESS),
        ("Completado", ItemStatus.COMPLETED),
        ("visto", ItemStatus.COMPLETED),
        ("Finished", ItemStatus.COMPLETED),
        ("Pendiente", ItemStatus.PENDING),
        ("Abandoned", ItemStatus.PENDING),
        ("not finished", ItemStatus.PENDING),
        ("No visto", ItemStatus.PENDING),
        ("Done", ItemStatus.COMPLETED),
        ("", ItemStatus.PENDING),
        (None, ItemStatus.PENDING),
    ],
)
def test_map_status(text, expected):
    assert map_status(text) == expected


def test_build_template():
    filename, content = build_template("Película")

    assert filename == "plantilla_importacion_movie.csv"
    assert content.splitlines() == [
        "Titulo,Estado (Pendiente/Progreso/Completado),Nota (1-5)",
        "Matrix,Completado,5",
        "Inception,Pendiente,",
        "Interstellar,Progreso,4",
    ]
