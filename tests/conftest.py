from pathlib import Path
from typing import Callable, List, Optional

import pytest

from devhosts.commands import CommandLine
from devhosts.errors import ExternalToolFailure
from devhosts.manager import SiteManager
from devhosts.trust import TrustStore

FIRST_SERIAL = 0x1000


def _arg(args: List[str], flag: str) -> str:
    return args[args.index(flag) + 1]


class FakeCommandLine(CommandLine):
    """Emulates the files openssl would write; records every command."""

    def __init__(self):
        self.commands: List[List[str]] = []
        self.fail_when: Optional[Callable[[List[str]], bool]] = None

    def _execute(self, args):
        if args[:1] == ["sudo"]:
            args = args[3:]
        self.commands.append(args)
        if self.fail_when is not None and self.fail_when(args):
            raise ExternalToolFailure(args, 1, "simulated failure")

        if args[:2] == ["openssl", "genrsa"]:
            Path(_arg(args, "-out")).write_text("PRIVATE KEY\n")
        elif args[:2] == ["openssl", "req"] and "-x509" in args:
            Path(_arg(args, "-keyout")).write_text("CA KEY\n")
            Path(_arg(args, "-out")).write_text("CA CERT\n")
        elif args[:2] == ["openssl", "req"]:
            Path(_arg(args, "-out")).write_text(f"CSR {_arg(args, '-subj')}\n")
        elif args[:2] == ["openssl", "x509"]:
            if "-CAserial" in args:
                serial_path = Path(_arg(args, "-CAserial"))
            else:
                serial_path = Path(_arg(args, "-CA")).with_suffix(".srl")
            current = int(serial_path.read_text(), 16) if serial_path.exists() else FIRST_SERIAL - 1
            serial = current + 1
            serial_path.write_text(f"{serial:X}\n")
            Path(_arg(args, "-out")).write_text(f"CERT serial={serial:X}\n")
        return ""

    def named(self, program: str, subcommand: Optional[str] = None) -> List[List[str]]:
        return [
            args for args in self.commands
            if args[0] == program and (subcommand is None or args[1] == subcommand)
        ]


@pytest.fixture(autouse=True)
def no_sudo(monkeypatch):
    monkeypatch.delenv("SUDO_USER", raising=False)


@pytest.fixture()
def cli():
    return FakeCommandLine()


@pytest.fixture()
def home(tmp_path):
    return tmp_path / "home"


@pytest.fixture()
def projects(tmp_path):
    path = tmp_path / "projects"
    path.mkdir()
    return path


@pytest.fixture()
def trust(cli):
    return TrustStore(cli, databases=["sql:/nssdb", "/firefox/abc.default"])


@pytest.fixture()
def manager(home, cli, trust, projects):
    return SiteManager(home, cli=cli, trust=trust, cwd=projects)
