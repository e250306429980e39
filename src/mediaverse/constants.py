"""Constants used throughout the application."""

from enum import Enum


class ItemCategory(str, Enum):
    """Kinds of tracked media."""

    MOVIE = "movie"
    SERIES = "series"
    ANIME = "anime"
    BOOK = "book"
    VIDEOGAME = "videogame"
    BOARDGAME = "boardgame"


class ItemStatus(str, Enum):
    """Item lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class Priority(str, Enum):
    """Backlog priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MilestoneType(str, Enum):
    """Milestone tag attached to a note."""

    NONE = "none"
    START = "start"
    HALF = "half"
    END = "end"
    REWATCH = "rewatch"


class MatchConfidence(str, Enum):
    """Quality of a bulk import lookup."""

    HIGH = "high"
    LOW = "low"
    NONE = "none"


# HTTP Status Codes
HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVICE_UNAVAILABLE = 503

# Provider endpoints
TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="
GOOGLE_BOOKS_BASE_URL = "https://www.googleapis.com/books/v1"
RAWG_BASE_URL = "https://api.rawg.io/api"

# Default values
DEFAULT_LANGUAGE = "es-ES"
DEFAULT_REGION = "ES"
DEFAULT_IMPORT_PACING_MS = 200
DEFAULT_ENRICHMENT_PACING_MS = 300
DEFAULT_HTTP_TIMEOUT_SECONDS = 15
DEFAULT_WEB_UI_PORT = 8080
TOP_CAST_SIZE = 5

# Remote tables
ITEMS_TABLE = "items"
NOTES_TABLE = "notes"
CATEGORIES_TABLE = "categories"

# Seeded for users with no categories of their own
DEFAULT_USER_CATEGORIES = [
    {"name": "Películas", "icon": "fa-film", "color": "#A855F7"},
    {"name": "Series", "icon": "fa-tv", "color": "#A855F7"},
    {"name": "Libros", "icon": "fa-book", "color": "#4CAF50"},
    {"name": "Videojuegos", "icon": "fa-gamepad", "color": "#00F5FF"},
    {"name": "Juegos de Mesa", "icon": "fa-dice", "color": "#FFC107"},
]
