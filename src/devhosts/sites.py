"""Site registry: parked roots, explicit links and proxy configs as one view."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from . import nginx
from .commands import user
from .config import Configuration, HomePaths
from .errors import AmbiguousReference
from .files import Filesystem
from .ssl import CertificateStore

logger = logging.getLogger(__name__)

PARKED = "parked"
LINKED = "linked"
PROXY = "proxy"


@dataclass
class Site:
    name: str
    path: str
    kind: str
    secured: bool
    url: str


class SiteRegistry:
    """Maps site names to directories or upstreams.

    Secured status is always derived from the certificate store; the registry
    reads certificates and nginx configs but never writes them.
    """

    def __init__(
        self,
        config: Configuration,
        paths: HomePaths,
        store: CertificateStore,
        files: Optional[Filesystem] = None,
        cwd: Optional[Union[str, Path]] = None,
    ):
        self.config = config
        self.paths = paths
        self.store = store
        self.files = files or Filesystem()
        self._cwd = cwd

    @property
    def cwd(self) -> str:
        return str(self._cwd) if self._cwd is not None else os.getcwd()

    def resolve(self, name: Optional[str] = None) -> str:
        """Name of the site meant by name, or by the current directory when None."""
        if name:
            return name

        linked = [site.name for site in self.links().values() if site.path == self.cwd]
        if len(linked) == 1:
            return linked[0]
        if len(linked) > 1:
            raise AmbiguousReference(self.cwd, linked)
        return os.path.basename(self.cwd.rstrip(os.sep))

    def host(self, path: Union[str, Path]) -> str:
        """Site name serving path, preferring a link that points at it."""
        path = os.path.realpath(path)
        sites_path = self.paths.sites_path()
        for link in self.files.scandir(sites_path):
            if self.files.realpath(sites_path / link) == path:
                return link
        return os.path.basename(path)

    def link(self, target: Union[str, Path], name: str) -> Path:
        sites_path = self.paths.sites_path()
        self.files.ensure_dir_exists(sites_path, user())

        # Links are looked up before any parked directory of the same name
        self.config.prepend_path(sites_path)

        link_path = self.paths.sites_path(name)
        self.files.symlink_as_user(target, link_path)
        logger.info(f"Linked {name} to {target}")
        return link_path

    def unlink(self, name: Optional[str] = None) -> str:
        name = self.resolve(name)
        link_path = self.paths.sites_path(name)
        if self.files.is_link(link_path):
            self.files.unlink(link_path)
            logger.info(f"Unlinked {name}")
        return name

    def prune_links(self) -> List[str]:
        self.files.ensure_dir_exists(self.paths.sites_path(), user())
        return self.files.remove_broken_links_at(self.paths.sites_path())

    def certificates(self) -> Set[str]:
        """Names of the secured sites, with the domain suffix stripped."""
        domain = self.config.domain
        names = set()
        for url in self.store.secured():
            if url.endswith(f".{domain}"):
                names.add(url[: -len(domain) - 1])
            elif "." in url:
                names.add(url.rsplit(".", 1)[0])
            else:
                names.add(url)
        return names

    def links(self) -> Dict[str, Site]:
        return self.get_sites(self.paths.sites_path(), self.certificates(), LINKED)

    def parked(self) -> Dict[str, Site]:
        certs = self.certificates()
        links = self.get_sites(self.paths.sites_path(), certs, LINKED)
        sites_path = str(self.paths.sites_path())

        parked: Dict[str, Site] = {}
        # Walk newest root first so earlier roots overwrite and take priority
        for path in reversed(self.config.get("paths", [])):
            if path == sites_path:
                continue
            for name, site in self.get_sites(path, certs, PARKED).items():
                if name not in links:
                    parked[name] = site
        return dict(sorted(parked.items()))

    def proxies(self) -> Dict[str, Site]:
        nginx_path = self.paths.nginx_path()
        domain = self.config.domain
        links = self.links()
        certs = self.certificates()

        proxies = {}
        for filename in self.files.scandir(nginx_path):
            if not filename.endswith(f".{domain}"):
                continue
            name = filename[: -len(domain) - 1]
            if name in links:
                continue
            upstream = nginx.proxy_host(self.files.get(nginx_path / filename))
            if upstream is None:
                continue
            proxies[name] = self._site(name, upstream, PROXY, certs)
        return proxies

    def secured(self) -> List[str]:
        return self.store.secured()

    def site_config(self, url: str) -> Optional[str]:
        path = self.paths.nginx_path(url)
        return self.files.get(path) if path.is_file() else None

    def get_sites(self, path: Union[str, Path], certs: Set[str], kind: str) -> Dict[str, Site]:
        """Every directory (or link to one) directly under path."""
        path = Path(path)
        sites = {}
        for name in self.files.scandir(path):
            site_path = path / name
            if self.files.is_link(site_path):
                real_path = self.files.read_link(site_path)
            else:
                real_path = self.files.realpath(site_path)
            if not self.files.is_dir(real_path):
                continue
            sites[name] = self._site(name, real_path, kind, certs)
        return sites

    def _site(self, name: str, path: str, kind: str, certs: Set[str]) -> Site:
        secured = name in certs
        scheme = "https" if secured else "http"
        return Site(
            name=name,
            path=path,
            kind=kind,
            secured=secured,
            url=f"{scheme}://{name}.{self.config.domain}",
        )
