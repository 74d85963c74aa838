"""Error types raised by devhosts operations."""

from pathlib import Path
from typing import List, Optional, Sequence, Union


class DevhostsError(Exception):
    """Base class for every error devhosts surfaces to its caller."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class AmbiguousReference(DevhostsError):
    def __init__(self, path: Union[str, Path], names: Sequence[str]):
        self.path = str(path)
        self.names: List[str] = list(names)
        super().__init__(
            f"There are {len(self.names)} links related to {self.path} "
            f"({', '.join(self.names)}), please specify the name",
            path=self.path,
            names=self.names,
        )


class InvalidUpstream(DevhostsError):
    def __init__(self, upstream: str):
        self.upstream = upstream
        super().__init__(f'"{upstream}" is not a valid URL', upstream=upstream)


class ExternalToolFailure(DevhostsError):
    def __init__(self, command: Sequence[str], returncode: Optional[int], output: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        reason = output.strip().splitlines()[-1] if output.strip() else "no output"
        super().__init__(
            f"Command `{' '.join(self.command)}` failed ({returncode}): {reason}",
            command=self.command,
            returncode=returncode,
        )


class FilesystemFailure(DevhostsError):
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Unable to write {self.path}: {reason}", path=self.path)


class SiteNotFound(DevhostsError):
    def __init__(self, host: str):
        self.host = host
        super().__init__(f"No site is parked or linked for {host}", host=host)
