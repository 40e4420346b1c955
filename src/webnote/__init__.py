from .codec import (
    DEFAULT_ENCODING,
    SUPPORTED_ENCODINGS,
    CodecError,
    DocumentDecodeError,
    DocumentEncodeError,
    UnsupportedEncodingError,
)
from .dialog import DialogError, DialogUnavailableError, FixedSaveDialog, SaveDialog, TkSaveDialog
from .document import Document, DocumentService
from .path_cell import FilePathCell
from .web import WebConfig, create_app

__all__ = [
    "DEFAULT_ENCODING",
    "SUPPORTED_ENCODINGS",
    "CodecError",
    "DocumentDecodeError",
    "DocumentEncodeError",
    "UnsupportedEncodingError",
    "DialogError",
    "DialogUnavailableError",
    "SaveDialog",
    "TkSaveDialog",
    "FixedSaveDialog",
    "Document",
    "DocumentService",
    "FilePathCell",
    "WebConfig",
    "create_app",
]
