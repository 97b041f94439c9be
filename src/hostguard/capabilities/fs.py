"""
Local filesystem adapter for HostGuard.

Security Note:
    Path policy is enforced BEFORE these methods are reached (see
    hostguard.policy.guard.guarded_read). The adapter still handles:
    - File not found / not a file errors
    - Permission and encoding errors
    - Confining save_file() to its save directory
"""

from pathlib import Path
from typing import Any

from hostguard.capabilities.base import FileSystemCapability
from hostguard.errors import CapabilityFailure


class LocalFileSystem(FileSystemCapability):
    """
    pathlib-backed filesystem capability.

    Arguments:
        save_dir: Directory that save_file() writes into
        selection: Path returned by select_path() (None = user cancelled);
            there is no interactive picker outside a desktop host
        encoding: Text encoding for read and save
    """

    def __init__(
        self,
        save_dir: str | Path = ".",
        selection: str | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self.save_dir = Path(save_dir)
        self.selection = selection
        self.encoding = encoding

    def read_text(self, path: str) -> str:
        file_path = Path(path)
        if not file_path.exists():
            raise self._failure("read_text", f"File not found: {path}")
        if not file_path.is_file():
            raise self._failure("read_text", f"Not a file: {path}")

        try:
            return file_path.read_text(encoding=self.encoding)
        except PermissionError as e:
            raise self._failure("read_text", f"Permission denied: {path}") from e
        except UnicodeDecodeError as e:
            raise self._failure("read_text", f"Encoding error reading {path}: {e}") from e
        except OSError as e:
            raise self._failure("read_text", f"Error reading {path}: {e}") from e

    def list_directory(self, path: str) -> list[dict[str, Any]]:
        dir_path = Path(path)
        if not dir_path.is_dir():
            raise self._failure("list_directory", f"Not a directory: {path}")

        try:
            entries = sorted(dir_path.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise self._failure("list_directory", f"Error listing {path}: {e}") from e

        return [
            {
                "name": entry.name,
                "path": str(entry),
                "type": "directory" if entry.is_dir() else "file",
            }
            for entry in entries
        ]

    def create_directory(self, path: str) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._failure("create_directory", f"Failed to create {path}: {e}") from e

    def save_file(self, name: str, content: str | bytes) -> str | None:
        # Only the final component is used; "../x" cannot leave save_dir
        target = self.save_dir / Path(name).name
        try:
            self.save_dir.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding=self.encoding)
        except OSError as e:
            raise self._failure("save_file", f"Error writing {target}: {e}") from e
        return str(target.resolve())

    def select_path(self, *, kind: str = "file", title: str | None = None) -> str | None:
        return self.selection

    @staticmethod
    def _failure(operation: str, message: str) -> CapabilityFailure:
        return CapabilityFailure(
            capability="filesystem",
            operation=operation,
            underlying_error=message,
        )
