"""Local certificate authority: root CA lifecycle and leaf certificates."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .commands import CommandLine, user
from .config import get_jinja_env
from .errors import DevhostsError
from .files import Filesystem

logger = logging.getLogger(__name__)

CA_NAME = "DevhostsCASelfSigned"
CA_ORGANIZATION = "Devhosts CA Self Signed Organization"
CA_COMMON_NAME = "Devhosts CA Self Signed CN"
CA_EMAIL = "rootcertificate@devhosts.local"
CA_DAYS = 730
LEAF_DAYS = 365
KEY_BITS = 2048

LEAF_EXTENSIONS = ("key", "csr", "crt", "conf")


@dataclass
class RootAuthority:
    """Root key, certificate and serial file, owned by one installation."""

    directory: Path
    name: str = CA_NAME

    @property
    def key_path(self) -> Path:
        return Path(self.directory) / f"{self.name}.key"

    @property
    def pem_path(self) -> Path:
        return Path(self.directory) / f"{self.name}.pem"

    @property
    def serial_path(self) -> Path:
        # openssl -CAcreateserial names the file after the CA certificate
        return Path(self.directory) / f"{self.name}.srl"

    def exists(self) -> bool:
        return self.key_path.exists() and self.pem_path.exists()

    def current_serial(self) -> Optional[int]:
        """Last serial number handed out, or None before the first issue."""
        if not self.serial_path.exists():
            return None
        value = self.serial_path.read_text().strip()
        return int(value, 16) if value else None


@dataclass
class LeafPaths:
    key: Path
    csr: Path
    crt: Path
    conf: Path

    def all(self) -> List[Path]:
        return [self.key, self.csr, self.crt, self.conf]


@dataclass
class CertificateStore:
    """The Certificates directory holding one artifact set per secured url."""

    directory: Path

    def paths(self, url: str) -> LeafPaths:
        base = Path(self.directory)
        return LeafPaths(*(base / f"{url}.{ext}" for ext in LEAF_EXTENSIONS))

    def exists(self, url: str) -> bool:
        """True when the full artifact set for url is present."""
        return all(path.exists() for path in self.paths(url).all())

    def has_artifacts(self, url: str) -> bool:
        return any(path.exists() for path in self.paths(url).all())

    def secured(self) -> List[str]:
        """Every url with a signed certificate.

        Keys, requests and extension configs left behind without a `.crt`
        do not make a url secured.
        """
        directory = Path(self.directory)
        if not directory.is_dir():
            return []
        return sorted(entry.name[: -len(".crt")] for entry in directory.glob("*.crt"))


class CertificateAuthority:
    """Issue and revoke leaf certificates signed by a lazily created root CA."""

    def __init__(
        self,
        root: RootAuthority,
        store: CertificateStore,
        cli: Optional[CommandLine] = None,
        files: Optional[Filesystem] = None,
    ):
        self.root = root
        self.store = store
        self.cli = cli or CommandLine()
        self.files = files or Filesystem()

    def ensure_root(self) -> bool:
        """Create the root key and certificate unless both exist.

        Returns True when a new root was generated. A failed generation
        removes whatever half of the pair openssl managed to write.
        """
        if self.root.exists():
            return False

        self.files.ensure_dir_exists(self.root.directory, user())
        self._remove_root()

        subject = (
            f"/O={CA_ORGANIZATION}/commonName={CA_COMMON_NAME}"
            f"/organizationalUnitName=Developers/emailAddress={CA_EMAIL}"
        )
        try:
            self.cli.run_as_user([
                "openssl", "req", "-new",
                "-newkey", f"rsa:{KEY_BITS}",
                "-days", str(CA_DAYS),
                "-nodes", "-x509",
                "-subj", subject,
                "-keyout", str(self.root.key_path),
                "-out", str(self.root.pem_path),
            ])
        except DevhostsError:
            self._remove_root()
            raise

        logger.info(f"Created root certificate authority in {self.root.directory}")
        return True

    def issue(self, url: str) -> LeafPaths:
        paths = self.store.paths(url)
        self.files.ensure_dir_exists(self.store.directory, user())

        self.build_certificate_conf(paths.conf, url)
        self.create_private_key(paths.key)
        self.create_signing_request(url, paths.key, paths.csr, paths.conf)

        if self.root.serial_path.exists():
            serial_args = ["-CAserial", str(self.root.serial_path)]
        else:
            serial_args = ["-CAcreateserial"]

        self.cli.run_as_user([
            "openssl", "x509", "-req", "-sha256",
            "-days", str(LEAF_DAYS),
            "-CA", str(self.root.pem_path),
            "-CAkey", str(self.root.key_path),
            *serial_args,
            "-in", str(paths.csr),
            "-out", str(paths.crt),
            "-extensions", "v3_req",
            "-extfile", str(paths.conf),
        ])

        logger.info(f"Issued certificate for {url} (serial {self.root.current_serial()})")
        return paths

    def revoke(self, url: str) -> bool:
        """Delete the artifacts of url. Returns whether any existed."""
        existed = False
        for path in self.store.paths(url).all():
            if path.exists():
                existed = True
                self.files.unlink(path)
        if existed:
            logger.info(f"Removed certificate for {url}")
        return existed

    def build_certificate_conf(self, path: Path, url: str):
        template = get_jinja_env().get_template("openssl.conf.j2")
        self.files.put_as_user(path, template.render(domain=url))

    def create_private_key(self, key_path: Path):
        self.cli.run_as_user(["openssl", "genrsa", "-out", str(key_path), str(KEY_BITS)])

    def create_signing_request(self, url: str, key_path: Path, csr_path: Path, conf_path: Path):
        subject = (
            f"/C=US/ST=MN/O=Devhosts/localityName=Devhosts/commonName={url}"
            "/organizationalUnitName=Devhosts/emailAddress=devhosts"
        )
        self.cli.run_as_user([
            "openssl", "req", "-new",
            "-key", str(key_path),
            "-out", str(csr_path),
            "-subj", subject,
            "-config", str(conf_path),
            "-passin", "pass:",
        ])

    def _remove_root(self):
        self.files.unlink(self.root.key_path)
        self.files.unlink(self.root.pem_path)
