"""Register leaf certificates with the NSS trust databases used by browsers."""

import glob
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .commands import CommandLine
from .errors import ExternalToolFailure

logger = logging.getLogger(__name__)


def default_databases() -> List[str]:
    """The shared system NSS database plus every Firefox default profile."""
    home = Path.home()
    databases = [f"sql:{home / '.pki' / 'nssdb'}"]
    databases.extend(sorted(glob.glob(str(home / ".mozilla" / "firefox" / "*.default*"))))
    return databases


class TrustStore:
    """Each database is handled on its own; one missing browser never blocks the rest."""

    def __init__(self, cli: Optional[CommandLine] = None, databases: Optional[Sequence[str]] = None):
        self.cli = cli or CommandLine()
        self._databases = list(databases) if databases is not None else None

    @property
    def databases(self) -> List[str]:
        if self._databases is None:
            return default_databases()
        return self._databases

    def install(self, url: str, crt_path: Path) -> List[str]:
        """Trust crt_path under the label url. Returns the databases that failed."""
        failed = []
        for database in self.databases:
            try:
                self.cli.run(["certutil", "-d", database, "-A", "-t", "TC", "-n", url, "-i", str(crt_path)])
            except ExternalToolFailure as e:
                logger.warning(f"Could not trust {url} in {database}: {e}")
                failed.append(database)
        return failed

    def remove(self, url: str):
        for database in self.databases:
            try:
                self.cli.run(["certutil", "-d", database, "-D", "-n", url])
            except ExternalToolFailure:
                # not present in that database
                logger.debug(f"{url} was not trusted in {database}")
