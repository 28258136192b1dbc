"""
File Encoder
- Input: a path, raw bytes, or an uploaded file object (Streamlit UploadedFile, open file)
- Output: InlineFile(data=<base64>, mime_type=<declared type>)

No size or type checks here; read errors propagate to the caller.
"""
from __future__ import annotations
import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

DEFAULT_MIME_TYPE = "application/octet-stream"

# advisory only; the uploader widget uses it, nothing enforces it
ACCEPTED_EXTENSIONS = ["pdf", "doc", "docx", "png", "jpg", "jpeg", "gif", "webp"]

FileInput = Union[str, Path, bytes, Any]


@dataclass(frozen=True)
class InlineFile:
    data: str
    mime_type: str

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


def _guess_mime(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    guessed, _ = mimetypes.guess_type(name)
    return guessed


def _read(file: FileInput) -> bytes:
    if isinstance(file, (bytes, bytearray)):
        return bytes(file)
    if isinstance(file, (str, Path)):
        return Path(file).read_bytes()
    if hasattr(file, "getvalue"):
        return file.getvalue()
    if hasattr(file, "read"):
        raw = file.read()
        return raw.encode("utf-8") if isinstance(raw, str) else raw
    raise TypeError(f"Unsupported file input: {type(file).__name__}")


def encode_file(file: FileInput, mime_type: Optional[str] = None) -> InlineFile:
    """Read `file` fully and return its base64 payload with a media type.

    The media type is, in order: the explicit `mime_type`, the object's
    declared `type` (as browsers report it), a guess from its name, then
    application/octet-stream.
    """
    raw = _read(file)
    name = str(file) if isinstance(file, (str, Path)) else getattr(file, "name", None)
    declared = mime_type or getattr(file, "type", None) or _guess_mime(name)
    return InlineFile(
        data=base64.b64encode(raw).decode("ascii"),
        mime_type=declared or DEFAULT_MIME_TYPE,
    )
