"""Render the nginx site files for secured and proxied domains."""

import logging
import re
from typing import Dict, Optional
from urllib.parse import urlparse

from .commands import user
from .config import STATIC_PREFIX, Configuration, HomePaths, get_jinja_env
from .errors import InvalidUpstream
from .files import Filesystem

logger = logging.getLogger(__name__)

PROXY_MARKER = "# devhosts stub: proxy.conf"

PROXY_PASS_RE = re.compile(r"proxy_pass\s+(?P<host>https?://[^\s;]+)\s*;")

# Directives that embed the site's own domain
DOMAIN_DIRECTIVES = [
    re.compile(r"server_name .*;"),
    re.compile(r"error_log .*;"),
    re.compile(r"ssl_certificate_key .*;"),
    re.compile(r"ssl_certificate .*;"),
]


def validate_upstream(upstream: str) -> str:
    parsed = urlparse(upstream)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidUpstream(upstream)
    return upstream


def is_proxy(contents: Optional[str]) -> bool:
    return bool(contents) and contents.startswith(PROXY_MARKER)


def proxy_host(contents: Optional[str]) -> Optional[str]:
    """The upstream of a proxy_pass directive, if the config has one."""
    if not contents:
        return None
    match = PROXY_PASS_RE.search(contents)
    return match.group("host").strip() if match else None


def replace_domain(contents: str, old: str, new: str) -> str:
    """Swap old for new inside the directives that name the site itself."""
    for pattern in DOMAIN_DIRECTIVES:
        contents = pattern.sub(lambda m: m.group(0).replace(old, new), contents)
    return contents


class NginxConfig:

    def __init__(self, config: Configuration, paths: HomePaths, files: Optional[Filesystem] = None):
        self.config = config
        self.paths = paths
        self.files = files or Filesystem()

    def context(self, url: str) -> Dict:
        settings = self.config.read()
        https_port = settings["https_port"]
        return {
            "home_path": str(self.paths.home),
            "server_path": settings["server_path"],
            "static_prefix": STATIC_PREFIX,
            "site": url,
            "cert": str(self.paths.certificates_path(url, "crt")),
            "key": str(self.paths.certificates_path(url, "key")),
            "http_port": settings["port"],
            "https_port": https_port,
            "redirect_port": "" if int(https_port) == 443 else f":{https_port}",
        }

    def build_secure(self, url: str, site_conf: Optional[str] = None) -> str:
        """Render the secure template, or return an already rendered body as is."""
        if site_conf is not None:
            return site_conf
        template = get_jinja_env().get_template("secure.conf.j2")
        return template.render(**self.context(url))

    def write_secure(self, url: str, site_conf: Optional[str] = None):
        self.files.ensure_dir_exists(self.paths.nginx_path(), user())
        self.files.put_as_user(self.paths.nginx_path(url), self.build_secure(url, site_conf))
        logger.info(f"Wrote nginx config for {url}")

    def build_proxy(self, url: str, upstream: str) -> str:
        validate_upstream(upstream)
        template = get_jinja_env().get_template("proxy.conf.j2")
        return template.render(proxy_host=upstream, **self.context(url))

    def read(self, url: str) -> Optional[str]:
        path = self.paths.nginx_path(url)
        return self.files.get(path) if path.is_file() else None

    def remove(self, url: str) -> bool:
        path = self.paths.nginx_path(url)
        if not self.files.exists(path):
            return False
        self.files.unlink(path)
        return True
