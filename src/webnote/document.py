from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from .codec import (
    DEFAULT_ENCODING,
    DocumentDecodeError,
    DocumentEncodeError,
    read_document,
    resolve_encoding,
    write_document,
)
from .dialog import DEFAULT_FILE_NAME, DialogError, SaveDialog
from .path_cell import FilePathCell

logger = logging.getLogger(__name__)

UNTITLED_TITLE = DEFAULT_FILE_NAME
ERROR_TITLE = "Error"


@dataclass(slots=True)
class Document:
    content: str
    title: str
    saved: bool
    # Failure kind: not_found, read, decode, dialog, encode or write.
    error: str | None = None
    detail: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "content": self.content,
            "title": self.title,
            "saved": self.saved,
        }
        if self.error is not None:
            payload["error"] = self.error
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


def title_for_path(path: Path | None) -> str:
    if path is None:
        return UNTITLED_TITLE
    return path.name or str(path)


class DocumentService:
    """
    Loads and saves the single note backing the editor.

    Every local failure is turned into a ``Document`` with ``saved=False``;
    nothing here raises to the HTTP layer. Disk access and the save dialog run
    on the loop's default executor so they never block other requests.
    """

    def __init__(
        self,
        path_cell: FilePathCell,
        dialog: SaveDialog,
        *,
        encoding: str = DEFAULT_ENCODING,
    ) -> None:
        self.path_cell = path_cell
        self.dialog = dialog
        self.encoding = resolve_encoding(encoding)
        self._write_lock = threading.Lock()
        # Only one first-save dialog at a time; waiters reuse its answer.
        self._dialog_lock = asyncio.Lock()

    @property
    def path(self) -> Path | None:
        return self.path_cell.get()

    async def load(self) -> Document:
        path = self.path_cell.get()
        if path is None:
            return Document(content="", title=UNTITLED_TITLE, saved=False)

        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(None, read_document, path, self.encoding)
        except FileNotFoundError as exc:
            # The first save will create it, so keep the real title.
            logger.warning("Failed to read file %s: %s", path, exc)
            return Document(
                content=f"Error reading file: {exc}",
                title=title_for_path(path),
                saved=False,
                error="not_found",
                detail=str(exc),
            )
        except DocumentDecodeError as exc:
            logger.warning("Failed to decode file %s: %s", path, exc)
            return Document(
                content=f"Error decoding file: {exc}",
                title=ERROR_TITLE,
                saved=False,
                error="decode",
                detail=str(exc),
            )
        except OSError as exc:
            logger.warning("Failed to read file %s: %s", path, exc)
            return Document(
                content=f"Error reading file: {exc}",
                title=ERROR_TITLE,
                saved=False,
                error="read",
                detail=str(exc),
            )
        return Document(content=text, title=title_for_path(path), saved=True)

    async def save(self, content: str, title: str = UNTITLED_TITLE) -> Document:
        loop = asyncio.get_running_loop()
        path = self.path_cell.get()
        if path is None:
            async with self._dialog_lock:
                path = self.path_cell.get()
                if path is None:
                    try:
                        picked = await loop.run_in_executor(None, self.dialog.ask_save_path)
                    except (DialogError, OSError) as exc:
                        logger.error("Save dialog failed: %s", exc)
                        return Document(
                            content=content,
                            title=title,
                            saved=False,
                            error="dialog",
                            detail=str(exc),
                        )
                    if picked is None:
                        logger.info("Save dialog cancelled; nothing written")
                        return Document(content=content, title=title, saved=False)
                    path = self._adopt(picked)

        resolved_title = title_for_path(path)
        try:
            await loop.run_in_executor(None, self._write, path, content)
        except DocumentEncodeError as exc:
            logger.warning("Not saving %s: %s", path, exc)
            return Document(
                content=content,
                title=resolved_title,
                saved=False,
                error="encode",
                detail=str(exc),
            )
        except OSError as exc:
            logger.error("Error writing file %s: %s", path, exc)
            return Document(
                content=content,
                title=resolved_title,
                saved=False,
                error="write",
                detail=str(exc),
            )
        return Document(content=content, title=resolved_title, saved=True)

    def _adopt(self, picked: Path) -> Path:
        if self.path_cell.try_init(picked):
            logger.info("New file will be saved at %s", picked)
            return picked
        # The cell may be shared with another service that got there first.
        winner = self.path_cell.get() or picked
        logger.warning(
            "Another save already chose %s; discarding dialog choice %s",
            winner,
            picked,
        )
        return winner

    def _write(self, path: Path, content: str) -> int:
        # Runs on a worker thread; saves from several tabs must not interleave temp files.
        with self._write_lock:
            return write_document(path, content, self.encoding)


__all__ = [
    "Document",
    "DocumentService",
    "ERROR_TITLE",
    "UNTITLED_TITLE",
    "title_for_path",
]
