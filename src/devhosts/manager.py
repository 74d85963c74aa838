"""Programmatic API for devhosts.

Every CLI command goes through SiteManager. Operations return data and raise
DevhostsError subclasses; none of them print.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from . import nginx
from .commands import CommandLine, user
from .config import HOME_PATH, Configuration, HomePaths
from .domain import DomainRenameCoordinator, RenameResult
from .errors import DevhostsError
from .files import Filesystem
from .nginx import NginxConfig
from .sites import Site, SiteRegistry
from .ssl import CertificateAuthority, CertificateStore, LeafPaths, RootAuthority
from .trust import TrustStore

logger = logging.getLogger(__name__)


class SiteManager:

    def __init__(
        self,
        home: Union[str, Path] = HOME_PATH,
        cli: Optional[CommandLine] = None,
        files: Optional[Filesystem] = None,
        trust: Optional[TrustStore] = None,
        cwd: Optional[Union[str, Path]] = None,
    ):
        self.paths = HomePaths(home)
        self.config = Configuration(home)
        self.cli = cli or CommandLine()
        self.files = files or Filesystem()
        self.trust = trust or TrustStore(self.cli)

        self.store = CertificateStore(self.paths.certificates_path())
        self.ca = CertificateAuthority(
            RootAuthority(self.paths.ca_path()), self.store, self.cli, self.files
        )
        self.nginx = NginxConfig(self.config, self.paths, self.files)
        self.registry = SiteRegistry(self.config, self.paths, self.store, self.files, cwd=cwd)

    @property
    def domain(self) -> str:
        return self.config.domain

    def qualify(self, name: str) -> str:
        """Append the configured domain unless name already ends with it."""
        suffix = f".{self.domain}"
        return name if name.endswith(suffix) else f"{name}{suffix}"

    # Certificates

    def secure(self, name: Optional[str] = None) -> str:
        url = self.qualify(self.registry.resolve(name))
        existing = self.nginx.read(url)
        self.secure_url(url, existing if nginx.is_proxy(existing) else None)
        return url

    def secure_url(self, url: str, site_conf: Optional[str] = None) -> LeafPaths:
        """Issue a certificate and write the nginx config for a fully qualified url.

        Always starts from a clean slate, and a failure removes whatever was
        written for url before the error is raised again.
        """
        self.unsecure_url(url)

        try:
            self.files.ensure_dir_exists(self.paths.ca_path(), user())
            self.files.ensure_dir_exists(self.paths.certificates_path(), user())
            self.files.ensure_dir_exists(self.paths.nginx_path(), user())
            self.files.ensure_dir_exists(self.paths.log_path(), user())

            self.ca.ensure_root()
            leaf = self.ca.issue(url)
            self.trust.install(url, leaf.crt)
            self.nginx.write_secure(url, site_conf)
        except DevhostsError:
            logger.warning(f"Securing {url} failed, removing partial artifacts")
            self.unsecure_url(url)
            raise
        return leaf

    def unsecure(self, name: Optional[str] = None) -> str:
        url = self.qualify(self.registry.resolve(name))
        self.unsecure_url(url)
        return url

    def unsecure_url(self, url: str) -> bool:
        """Remove certificate, nginx config and trust entries. Returns whether anything existed."""
        had_certificate = self.ca.revoke(url)
        had_config = self.nginx.remove(url)
        if had_certificate:
            self.trust.remove(url)
        return had_certificate or had_config

    def unsecure_all(self) -> Tuple[List[str], List[str]]:
        """Unsecure every parked or linked site. Returns (unsecured, still secured)."""
        unsecured = []
        for site in self._served_sites():
            if site.secured:
                url = self.qualify(site.name)
                self.unsecure_url(url)
                unsecured.append(url)

        remaining = [self.qualify(site.name) for site in self._served_sites() if site.secured]
        return unsecured, remaining

    def regenerate_secured_sites_config(self) -> List[str]:
        """Re-render the nginx config of every secured site, keeping proxy bodies."""
        regenerated = []
        for url in self.store.secured():
            if nginx.is_proxy(self.nginx.read(url)):
                logger.debug(f"Keeping proxy config for {url}")
                continue
            self.nginx.write_secure(url)
            regenerated.append(url)
        return regenerated

    # Proxies

    def proxy_create(self, name: str, upstream: str) -> str:
        nginx.validate_upstream(upstream)
        url = self.qualify(name)
        self.secure_url(url, self.nginx.build_proxy(url, upstream))
        logger.info(f"Proxying https://{url} to {upstream}")
        return url

    def proxy_delete(self, name: str) -> str:
        url = self.qualify(name)
        self.unsecure_url(url)
        self.nginx.remove(url)
        return url

    # Links and parked roots

    def link(self, target: Union[str, Path], name: Optional[str] = None) -> Path:
        target = Path(target)
        return self.registry.link(target, name or target.name)

    def unlink(self, name: Optional[str] = None) -> str:
        return self.registry.unlink(name)

    def prune_links(self) -> List[str]:
        return self.registry.prune_links()

    def park(self, path: Union[str, Path]):
        self.config.add_path(Path(path))

    def forget(self, path: Union[str, Path]):
        self.config.remove_path(Path(path))

    # Domain

    def rename_domain(self, old: str, new: str) -> RenameResult:
        self.config.set("domain", new)
        return DomainRenameCoordinator(self).rename(old, new)

    # Views

    def list_links(self) -> Dict[str, Site]:
        return self.registry.links()

    def list_parked(self) -> Dict[str, Site]:
        return self.registry.parked()

    def list_proxies(self) -> Dict[str, Site]:
        return self.registry.proxies()

    def list_secured(self) -> List[str]:
        return self.registry.secured()

    def _served_sites(self) -> List[Site]:
        sites = {**self.registry.parked(), **self.registry.links()}
        return [sites[name] for name in sorted(sites)]
