"""
File type detection from MIME type and file name.
"""

import mimetypes
from pathlib import Path
from typing import Optional, Union

from autocat.exceptions import UnsupportedFileTypeError
from autocat.models import FileType


def detect_file_type(filename: Union[str, Path], mime_type: Optional[str] = None) -> FileType:
    """
    Detect the modality of an uploaded file.

    The MIME type wins when given; otherwise it is guessed from the file
    extension. A `.json` extension is accepted whatever the MIME type says,
    since browsers often send JSON uploads as text/plain.

    Raises:
        UnsupportedFileTypeError: not an image, PDF, JSON or audio file
    """
    name = str(filename)
    if name.lower().endswith(".json"):
        return FileType.JSON

    mime = (mime_type or mimetypes.guess_type(name)[0] or "").lower()
    if mime.startswith("image/"):
        return FileType.IMAGE
    if mime == "application/pdf":
        return FileType.PDF
    if mime == "application/json":
        return FileType.JSON
    if mime.startswith("audio/"):
        return FileType.AUDIO

    raise UnsupportedFileTypeError(
        f"Only image, PDF, JSON, and audio files are supported (got {name!r}, {mime or 'unknown type'})"
    )
