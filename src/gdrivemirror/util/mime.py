from __future__ import annotations

FOLDER_MIME: str = "application/vnd.google-apps.folder"

# Google-native types have no binary content; media download rejects them.
GOOGLE_APP_PREFIX: str = "application/vnd.google-apps."


def is_folder(mime_type: str | None) -> bool:
    return mime_type == FOLDER_MIME


def is_google_app(mime_type: str | None) -> bool:
    """True for Docs/Sheets/Slides/... (any ``application/vnd.google-apps.*``)."""
    return isinstance(mime_type, str) and mime_type.startswith(GOOGLE_APP_PREFIX)


def is_downloadable(mime_type: str | None) -> bool:
    """
    Return True if the object's bytes can be fetched with a media download.

    Folders and Google-native documents are not downloadable; exporting
    them to Office/PDF formats is not supported.
    """
    return not is_google_app(mime_type)
