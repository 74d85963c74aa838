"""Front-controller resolution shared by every project driver."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

PathLike = Union[str, Path]


@dataclass(frozen=True)
class StaticBoundary:
    """A sub-path requested through a static bridge script."""

    prefix: str
    rest: str

    @property
    def uri(self) -> str:
        return self.rest


@dataclass(frozen=True)
class IndexFallback:
    uri: str


@dataclass(frozen=True)
class PassThrough:
    uri: str


@dataclass
class FrontController:
    script: str
    path_info: Optional[str] = None
    server: Dict[str, str] = field(default_factory=dict)


class Driver:
    """Decides how a request against one project directory is served."""

    name = "driver"

    def serves(self, site_path: PathLike, site_name: str, uri: str) -> bool:
        raise NotImplementedError

    def is_static_file(self, site_path: PathLike, site_name: str, uri: str) -> Optional[str]:
        static_file_path = f"{site_path}{uri}"
        if uri and Path(static_file_path).is_file():
            return static_file_path
        return None

    def classify(self, uri: str):
        return PassThrough(uri)

    def mutate_uri(self, uri: str) -> str:
        return self.classify(uri).uri

    def front_controller_path(self, site_path: PathLike, site_name: str, decision) -> FrontController:
        raise NotImplementedError

    def route(self, site_path: PathLike, site_name: str, uri: str) -> FrontController:
        return self.front_controller_path(site_path, site_name, self.classify(uri))

    def as_php_index_file_in_directory(self, site_path: PathLike, uri: str) -> str:
        """index.php for the requested directory, honouring a public/ docroot."""
        site_path = str(site_path)
        if not Path(site_path, "index.php").is_file() and Path(site_path, "public", "index.php").is_file():
            site_path = f"{site_path}/public"
        return f"{site_path}{uri.rstrip('/')}/index.php"


class BasicDriver(Driver):
    """Serves any directory: the file itself if it exists, else the nearest index."""

    name = "basic"

    def serves(self, site_path: PathLike, site_name: str, uri: str) -> bool:
        return True

    def front_controller_path(self, site_path: PathLike, site_name: str, decision) -> FrontController:
        uri = decision.uri
        server = {"PHP_SELF": uri, "SERVER_ADDR": "127.0.0.1"}

        actual_file = f"{site_path}{uri}"
        if uri and Path(actual_file).is_file():
            return FrontController(actual_file, server=server)

        html_index = f"{site_path}{uri.rstrip('/')}/index.html"
        php_index = self.as_php_index_file_in_directory(site_path, uri)
        if not Path(php_index).is_file() and Path(html_index).is_file():
            return FrontController(html_index, server=server)
        return FrontController(php_index, server=server)
