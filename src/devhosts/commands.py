"""Synchronous execution of external tools (openssl, certutil)."""

import getpass
import logging
import os
import subprocess
from typing import List, Sequence

from .errors import ExternalToolFailure

logger = logging.getLogger(__name__)


def user() -> str:
    """Name of the user that invoked devhosts, even under sudo."""
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        return sudo_user
    return getpass.getuser()


def running_under_sudo() -> bool:
    return os.geteuid() == 0 and bool(os.environ.get("SUDO_USER"))


class CommandLine:
    """Run commands and raise ExternalToolFailure when they fail."""

    def run(self, args: Sequence[str]) -> str:
        return self._execute(list(args))

    def run_as_user(self, args: Sequence[str]) -> str:
        """Run as the invoking user so generated files are not owned by root."""
        args = list(args)
        if running_under_sudo():
            args = ["sudo", "-u", user(), *args]
        return self._execute(args)

    def _execute(self, args: List[str]) -> str:
        logger.debug(f"Running: {' '.join(args)}")
        try:
            result = subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ExternalToolFailure(args, None, str(e)) from e

        if result.returncode != 0:
            raise ExternalToolFailure(args, result.returncode, result.stderr or result.stdout)
        return result.stdout
