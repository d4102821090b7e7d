"""A file-selection dialog model: directory listing, type filters and selection."""

from __future__ import annotations

import copy as _copy
import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

_INPUT_NAME_LIMIT = 511  # characters kept from a typed or selected file name
_UNIVERSAL_FILTER = ".*"
_CASE_INSENSITIVE = os.name == "nt"


class FileBrowserFlags(enum.IntFlag):
    """Options that change how the browser behaves."""

    NONE = 0
    SELECT_DIRECTORY = 1 << 0
    ENTER_NEW_FILENAME = 1 << 1
    NO_MODAL = 1 << 2
    NO_TITLE_BAR = 1 << 3
    NO_STATUS_BAR = 1 << 4
    CLOSE_ON_ESC = 1 << 5
    CREATE_NEW_DIR = 1 << 6
    MULTIPLE_SELECTION = 1 << 7


@dataclass(frozen=True)
class FileRecord:
    """One entry of the listed directory."""

    is_dir: bool
    name: str
    show_name: str
    extension: str


def _extension(name: str) -> str:
    """Extension of a file name, with the leading dot; empty for dot-files."""
    if name in (".", ".."):
        return ""
    dot = name.rfind(".")
    return name[dot:] if dot > 0 else ""


class FileBrowser:
    """State of a file browser window, driven by the user's actions."""

    def __init__(
        self, flags: FileBrowserFlags | int = FileBrowserFlags.NONE, title: str = "file browser"
    ) -> None:
        self.flags = FileBrowserFlags(flags)
        self.width = 700
        self.height = 450
        self.title = title
        self.is_opened = False
        self.status = ""
        self.input_name = ""
        self.type_filter_index = 0
        self.has_all_filter = False
        self._type_filters: list[str] = []
        self._ok = False
        self._selected: set[str] = set()
        self._records: list[FileRecord] = []
        self._pwd = Path.cwd()
        self.set_pwd()

    @property
    def pwd(self) -> Path:
        """The directory being browsed."""
        return self._pwd

    @property
    def type_filters(self) -> list[str]:
        return list(self._type_filters)

    @property
    def records(self) -> list[FileRecord]:
        """All entries of the current directory, directories first."""
        return list(self._records)

    def copy(self) -> FileBrowser:
        """Return an independent browser with the same state and no status text."""
        other = _copy.copy(self)
        other._type_filters = list(self._type_filters)
        other._selected = set(self._selected)
        other._records = list(self._records)
        other.status = ""
        return other

    def set_window_size(self, width: float, height: float) -> None:
        """Set the window size in pixels."""
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise ValueError("window size must be positive")
        self.width = width
        self.height = height

    def open(self) -> None:
        """Open the window with no selection."""
        self.clear_selected()
        self.status = ""
        self.is_opened = True

    def close(self) -> None:
        """Close the window and drop the selection."""
        self.clear_selected()
        self.status = ""
        self.is_opened = False

    def has_selected(self) -> bool:
        """True once a choice was confirmed."""
        return self._ok

    def set_pwd(self, pwd: str | os.PathLike[str] | None = None) -> bool:
        """Browse ``pwd`` (the working directory by default).

        On failure the error goes to the status text, the working directory is
        browsed instead and False is returned.
        """
        try:
            self._list_directory(Path.cwd() if pwd is None else Path(pwd))
            return True
        except Exception as err:  # any listing failure falls back to cwd
            self.status = f"last error: {err}"
        self._list_directory(Path.cwd())
        return False

    def selected(self) -> Path:
        """The first selected path, or the browsed directory when nothing is selected."""
        if not self._selected:
            return self._pwd
        return self._pwd / min(self._selected)

    def multi_selected(self) -> list[Path]:
        """All selected paths in order, or the browsed directory alone."""
        if not self._selected:
            return [self._pwd]
        return [self._pwd / name for name in sorted(self._selected)]

    def clear_selected(self) -> None:
        self._selected.clear()
        self.input_name = ""
        self._ok = False

    def set_type_filters(self, type_filters: Iterable[str]) -> None:
        """Set extension filters such as ``[".h", ".cpp"]``; ``".*"`` matches all.

        With more than one filter and no universal one, a combined filter that
        accepts any of them is put first.
        """
        filters: list[str] = []
        for raw in type_filters:
            value = raw.lower() if _CASE_INSENSITIVE else raw
            if _CASE_INSENSITIVE and value in filters:
                continue
            filters.append(value)

        self.has_all_filter = len(filters) > 1 and _UNIVERSAL_FILTER not in filters
        combined = [",".join(filters)] if self.has_all_filter else []
        self._type_filters = combined + filters
        self.type_filter_index = 0

    def set_current_type_filter_index(self, index: int) -> None:
        self.type_filter_index = index

    def is_extension_matched(self, extension: str) -> bool:
        """Whether a file with ``extension`` passes the current type filter."""
        if _CASE_INSENSITIVE:
            extension = extension.lower()
        filters = self._type_filters
        if not filters:
            return True
        index = self.type_filter_index
        if not 0 <= index < len(filters):
            return True
        if self.has_all_filter and index == 0:
            return extension in filters[1:]
        if filters[index] == _UNIVERSAL_FILTER:
            return True
        return extension == filters[index]

    def visible_records(self) -> list[FileRecord]:
        """Entries shown in the listing under the current filter."""
        return [
            record
            for record in self._records
            if (record.is_dir or self.is_extension_matched(record.extension))
            and not record.name.startswith("$")
        ]

    def _visible(self, name: str) -> FileRecord:
        for record in self.visible_records():
            if record.name == name:
                return record
        raise KeyError(name)

    def click(self, name: str, multi_select: bool = False) -> None:
        """Click a listed entry; ``multi_select`` stands for a held Ctrl or Shift."""
        record = self._visible(name)
        multi = bool(multi_select) and bool(self.flags & FileBrowserFlags.MULTIPLE_SELECTION)
        select_dirs = bool(self.flags & FileBrowserFlags.SELECT_DIRECTORY)

        if name in self._selected:
            if multi:
                self._selected.discard(name)
            else:
                self._selected.clear()
            self.input_name = ""
        elif name != "..":
            if record.is_dir == select_dirs:
                if not multi:
                    self._selected.clear()
                self._selected.add(name)
                if not select_dirs:
                    self.input_name = name[:_INPUT_NAME_LIMIT]
        elif not multi:
            self._selected.clear()

    def double_click(self, name: str) -> None:
        """Enter a directory, or choose a file and close the window."""
        record = self._visible(name)
        if record.is_dir:
            target = self._pwd.parent if name == ".." else self._pwd / name
            self.set_pwd(target)
        elif not self.flags & FileBrowserFlags.SELECT_DIRECTORY:
            self._selected = {name}
            self._ok = True
            self.is_opened = False

    def enter_filename(self, name: str) -> None:
        """Type a (possibly new) file name into the name field."""
        if self.flags & FileBrowserFlags.SELECT_DIRECTORY or not (
            self.flags & FileBrowserFlags.ENTER_NEW_FILENAME
        ):
            raise ValueError("this browser does not accept typed file names")
        self.input_name = name[:_INPUT_NAME_LIMIT]
        if self.input_name:
            self._selected = {self.input_name}

    def create_directory(self, name: str) -> bool:
        """Create directory ``name`` in the browsed directory and list it again."""
        if not self.flags & FileBrowserFlags.CREATE_NEW_DIR:
            raise ValueError("this browser cannot create directories")
        if not name:
            return False
        try:
            (self._pwd / name).mkdir()
        except FileExistsError:
            self.status = f"failed to create {name}"
            return False
        self.set_pwd(self._pwd)
        return True

    def confirm(self) -> bool:
        """Press "ok"; returns whether a choice was confirmed."""
        if self.flags & FileBrowserFlags.SELECT_DIRECTORY or self._selected:
            self._ok = True
            self.is_opened = False
        return self._ok

    def cancel(self) -> None:
        """Press "cancel": the window closes without a choice."""
        self.is_opened = False

    def _list_directory(self, pwd: Path) -> None:
        records = [FileRecord(True, "..", "[D] ..", "")]
        with os.scandir(pwd) as entries:
            for entry in entries:
                if entry.is_file():
                    is_dir = False
                elif entry.is_dir():
                    is_dir = True
                else:
                    continue
                if not entry.name:
                    continue
                prefix = "[D] " if is_dir else "[F] "
                records.append(
                    FileRecord(is_dir, entry.name, prefix + entry.name, _extension(entry.name))
                )
        records.sort(key=lambda record: (not record.is_dir, record.name))
        self._records = records
        self._pwd = pwd.absolute()
        self._selected.clear()
        self.input_name = ""