"""
Note vault storage for bookmark documents.

A vault is a tree of text files addressed by forward-slash paths relative to
its root ("Browser Favorites/News.md"). Every write replaces the whole file.
"""
import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """
    Normalize a vault path.

    Backslashes become slashes, duplicate and trailing slashes are dropped
    and the result never starts with a slash.

    Examples:
        >>> normalize_path("/Browser Favorites//News.md")
        'Browser Favorites/News.md'
    """
    path = path.replace("\\", "/").strip()
    if not path:
        return ""
    normalized = posixpath.normpath(path).lstrip("/")
    return "" if normalized == "." else normalized


class Vault(ABC):
    """File system surface the bookmark workflows operate on."""

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the full text of a file."""

    @abstractmethod
    def write(self, path: str, text: str) -> None:
        """Create or overwrite a file with ``text``."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether a file or folder exists at ``path``."""

    @abstractmethod
    def list_files(self) -> List[str]:
        """All file paths in the vault, in a stable order."""

    @abstractmethod
    def create_folder(self, path: str) -> None:
        """Create a folder (and its parents)."""

    def read_optional(self, path: str) -> Optional[str]:
        """Return the file's text, or None when it does not exist."""
        if not self.exists(path):
            return None
        return self.read(path)

    def markdown_files(self, folder: str) -> List[str]:
        """Markdown files located under ``folder``."""
        prefix = normalize_path(folder)
        if prefix:
            prefix += "/"
        return [
            path for path in self.list_files()
            if path.startswith(prefix) and path.endswith(".md")
        ]


class FileVault(Vault):
    """A vault backed by a directory on disk."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / normalize_path(path)

    def read(self, path: str) -> str:
        with open(self._resolve(path), "r", encoding="utf-8") as f:
            return f.read()

    def write(self, path: str, text: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps "\n" as written on every platform
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        logger.debug(f"Wrote {len(text)} characters to {target}")

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def list_files(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file()
        )

    def create_folder(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)
        logger.info(f"Created folder {path}")


class MemoryVault(Vault):
    """An in-memory vault, handy for embedding and tests."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = {}
        self.folders = set()
        for path, text in (files or {}).items():
            self.write(path, text)

    def read(self, path: str) -> str:
        try:
            return self.files[normalize_path(path)]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write(self, path: str, text: str) -> None:
        path = normalize_path(path)
        self.files[path] = text
        parent = posixpath.dirname(path)
        if parent:
            self.create_folder(parent)

    def exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path in self.files or path in self.folders

    def list_files(self) -> List[str]:
        return sorted(self.files)

    def create_folder(self, path: str) -> None:
        path = normalize_path(path)
        while path:
            self.folders.add(path)
            path = posixpath.dirname(path)
