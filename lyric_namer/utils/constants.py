"""Named constants for Lyric Namer. No magic numbers."""

# --- Application ---
APP_NAME = "Lyric Namer"
APP_VERSION = "0.1.0"

# --- Supported Audio Extensions ---
SUPPORTED_EXTENSIONS = frozenset({
    ".mp3",
    ".flac",
    ".m4a",
    ".aac",
    ".mp4",
    ".ogg",
    ".opus",
})

# --- Genre Handling ---
GENRE_SEPARATOR = ";"
GENRE_JOINER = "; "  # Used when writing a genre list back to a tag
FILENAME_GENRE_SEPARATOR = ","  # Filenames must not carry the metadata delimiter
MIN_GENRES_KEPT = 2  # Cleanup never shrinks a track below this many genres

# --- Naming Rules ---
DEFAULT_START_NUMBER = 1
DEFAULT_ALBUM_TEMPLATE = "{album}"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_ALBUM = "Unknown Album"
UNKNOWN_GENRE = "Unknown"

# --- Rule-set File Format ---
RULES_FORMAT_VERSION = "1.0"
DEFAULT_RULES_FILENAME = "naming-rules.json"

# --- Renaming ---
TEMP_RENAME_PREFIX = "Temp_"

# --- Progress ---
DEFAULT_PROGRESS_INTERVAL = 5  # Emit an "applying" event every N files

# --- Scraping ---
INSTRUMENTAL_MARKER = "[Instrumental]"
MIN_SCRAPED_LYRICS_LENGTH = 20
DEFAULT_SOURCE_HOST = "suno.com"

# --- ID3 Tag Constants ---
ID3_ENCODING_UTF8 = 3
ID3_LYRICS_LANGUAGE = "eng"

# --- Paths ---
DEFAULT_CONFIG_FILENAME = "config.yaml"

# --- Report Strings ---
REPORT_TITLE = "Lyric Namer -- Naming Apply Report"
REPORT_JSON_FILENAME = "_naming_report.json"
REPORT_TXT_FILENAME = "_naming_report.txt"
