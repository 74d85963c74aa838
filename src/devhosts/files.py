"""Filesystem helpers that hand ownership back to the invoking user."""

import logging
import os
import pwd
import shutil
from pathlib import Path
from typing import List, Optional, Union

from .commands import running_under_sudo, user
from .errors import FilesystemFailure

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class Filesystem:

    def ensure_dir_exists(self, path: PathLike, owner: Optional[str] = None):
        path = Path(path)
        if path.is_dir():
            return
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemFailure(path, e.strerror or str(e)) from e
        self._chown(path, owner)

    def get(self, path: PathLike) -> str:
        return Path(path).read_text()

    def put_as_user(self, path: PathLike, content: str):
        path = Path(path)
        try:
            path.write_text(content)
        except OSError as e:
            raise FilesystemFailure(path, e.strerror or str(e)) from e
        self._chown(path, user())

    def exists(self, path: PathLike) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def is_link(self, path: PathLike) -> bool:
        return Path(path).is_symlink()

    def read_link(self, path: PathLike) -> str:
        return os.readlink(path)

    def realpath(self, path: PathLike) -> str:
        return os.path.realpath(path)

    def scandir(self, path: PathLike) -> List[str]:
        """Sorted entry names of a directory, without dotfiles."""
        path = Path(path)
        if not path.is_dir():
            return []
        return sorted(entry for entry in os.listdir(path) if not entry.startswith("."))

    def unlink(self, path: PathLike):
        if os.path.lexists(path):
            os.unlink(path)

    def symlink_as_user(self, target: PathLike, link: PathLike):
        link = Path(link)
        self.unlink(link)
        try:
            link.symlink_to(target)
        except OSError as e:
            raise FilesystemFailure(link, e.strerror or str(e)) from e
        if running_under_sudo():
            os.lchown(link, *self._ids(user()))

    def remove_broken_links_at(self, path: PathLike) -> List[str]:
        removed = []
        for name in self.scandir(path):
            link = Path(path) / name
            if link.is_symlink() and not link.exists():
                logger.info(f"Removing broken link {link}")
                link.unlink()
                removed.append(name)
        return removed

    def _chown(self, path: Path, owner: Optional[str]):
        if owner and running_under_sudo():
            shutil.chown(path, owner)

    @staticmethod
    def _ids(owner: str):
        entry = pwd.getpwnam(owner)
        return entry.pw_uid, entry.pw_gid
