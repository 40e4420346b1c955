from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol, Sequence

DEFAULT_FILE_NAME = "Untitled"
DEFAULT_FILETYPES: tuple[tuple[str, str], ...] = (
    ("Plaintext", "*.txt"),
    ("Markdown", "*.md"),
    ("All files", "*"),
)


class DialogError(RuntimeError):
    """Base class for save-dialog failures."""


class DialogUnavailableError(DialogError):
    """Raised when no native dialog can be shown (no tkinter, no display)."""


class SaveDialog(Protocol):
    def ask_save_path(self) -> Path | None:
        """Block until the user picks a destination; ``None`` means cancelled."""
        ...


class TkSaveDialog:
    """Native "save as" picker backed by tkinter.

    Each call builds a hidden root window on the calling thread and tears it
    down afterwards. Tk is not thread-safe, so concurrent calls queue on a
    lock and only one dialog is on screen at a time.
    """

    def __init__(
        self,
        *,
        title: str = "Save note",
        initial_file: str = DEFAULT_FILE_NAME,
        initial_dir: Path | None = None,
        filetypes: Sequence[tuple[str, str]] = DEFAULT_FILETYPES,
    ) -> None:
        self.title = title
        self.initial_file = initial_file
        self.initial_dir = initial_dir
        self.filetypes = tuple(filetypes)
        self._lock = threading.Lock()

    def ask_save_path(self) -> Path | None:
        try:
            import tkinter as tk
            from tkinter import filedialog
        except ImportError as exc:
            raise DialogUnavailableError(
                "tkinter is not available; start webnote with --save-as PATH instead."
            ) from exc

        with self._lock:
            try:
                root = tk.Tk()
            except tk.TclError as exc:
                raise DialogUnavailableError(f"Cannot open a native dialog: {exc}") from exc
            try:
                root.withdraw()
                root.attributes("-topmost", True)
                options: dict[str, object] = {
                    "parent": root,
                    "title": self.title,
                    "initialfile": self.initial_file,
                    "defaultextension": ".txt",
                    "filetypes": list(self.filetypes),
                }
                if self.initial_dir is not None:
                    options["initialdir"] = str(self.initial_dir)
                selected = filedialog.asksaveasfilename(**options)
            finally:
                root.destroy()

        # Tk returns "" (or an empty tuple on some platforms) on cancel.
        if not selected:
            return None
        return Path(selected).expanduser().resolve()


class FixedSaveDialog:
    """Answers every prompt with a preset path; used for headless runs."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def ask_save_path(self) -> Path | None:
        return self.path


__all__ = [
    "DEFAULT_FILE_NAME",
    "DEFAULT_FILETYPES",
    "DialogError",
    "DialogUnavailableError",
    "SaveDialog",
    "TkSaveDialog",
    "FixedSaveDialog",
]
