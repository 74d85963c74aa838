"""Configuration management for devhosts."""

import os
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from jinja2 import Environment, PackageLoader, select_autoescape

from .errors import FilesystemFailure

HOME_PATH = Path(os.environ.get("DEVHOSTS_HOME", Path.home() / ".config" / "devhosts"))

# Internal location nginx uses to serve files outside the site root
STATIC_PREFIX = "devhosts-static-7c1e0a52"

DEFAULTS = {
    "domain": "test",
    "paths": [],
    "port": 80,
    "https_port": 443,
}


def get_jinja_env():
    """Get Jinja2 environment for templates."""
    return Environment(
        loader=PackageLoader("devhosts", "templates"),
        autoescape=select_autoescape(["html", "xml"], default_for_string=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class HomePaths:
    """Locations of the persisted state under the installation home."""

    def __init__(self, home: Union[str, Path] = HOME_PATH):
        self.home = Path(home)

    def ca_path(self, ca_file: Optional[str] = None) -> Path:
        return self.home / "CA" / ca_file if ca_file else self.home / "CA"

    def certificates_path(self, url: Optional[str] = None, extension: Optional[str] = None) -> Path:
        if not url:
            return self.home / "Certificates"
        return self.home / "Certificates" / (f"{url}.{extension}" if extension else url)

    def nginx_path(self, name: Optional[str] = None) -> Path:
        return self.home / "Nginx" / name if name else self.home / "Nginx"

    def sites_path(self, link: Optional[str] = None) -> Path:
        return self.home / "Sites" / link if link else self.home / "Sites"

    def log_path(self) -> Path:
        return self.home / "Log"


class Configuration:
    """Read and write config.yaml in the installation home."""

    def __init__(self, home: Union[str, Path] = HOME_PATH):
        self.home = Path(home)
        self.config_file = self.home / "config.yaml"

    def read(self) -> Dict:
        config = dict(DEFAULTS, paths=[], server_path=str(self.home / "server.php"))
        if self.config_file.exists():
            with open(self.config_file) as f:
                config.update(yaml.safe_load(f) or {})
        return config

    def write(self, config: Dict):
        try:
            self.home.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                yaml.dump(config, f, default_flow_style=False)
        except OSError as e:
            raise FilesystemFailure(self.config_file, e.strerror or str(e)) from e

    def get(self, key: str, default=None):
        return self.read().get(key, default)

    def set(self, key: str, value):
        config = self.read()
        config[key] = value
        self.write(config)

    @property
    def domain(self) -> str:
        return self.get("domain")

    def add_path(self, path: Union[str, Path], prepend: bool = False):
        """Register a parked root; prepending also moves an existing entry first."""
        path = str(path)
        config = self.read()
        paths = [p for p in config["paths"] if p != path]
        if prepend:
            paths.insert(0, path)
        elif path in config["paths"]:
            return
        else:
            paths.append(path)
        config["paths"] = paths
        self.write(config)

    def prepend_path(self, path: Union[str, Path]):
        self.add_path(path, prepend=True)

    def remove_path(self, path: Union[str, Path]):
        config = self.read()
        config["paths"] = [p for p in config["paths"] if p != str(path)]
        self.write(config)
