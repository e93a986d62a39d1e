from .mime import FOLDER_MIME, is_downloadable, is_folder, is_google_app
from .paths import TEMP_SUFFIX, local_name, temp_path
from .time import now_utc, parse_optional, parse_rfc3339, stamp, to_rfc3339

__all__ = [
    "FOLDER_MIME",
    "is_folder",
    "is_google_app",
    "is_downloadable",
    "TEMP_SUFFIX",
    "local_name",
    "temp_path",
    "now_utc",
    "parse_rfc3339",
    "parse_optional",
    "to_rfc3339",
    "stamp",
]
