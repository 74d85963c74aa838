"""Moodle serves themed assets through bridge scripts such as styles.php."""

import re
from pathlib import Path

from .base import BasicDriver, FrontController, IndexFallback, PassThrough, PathLike, StaticBoundary

# Checked in order; the first bridge found in the URI wins
STATIC_SCRIPTS = [
    "styles.php",
    "javascript.php",
    "jquery.php",
    "requirejs.php",
    "font.php",
    "image.php",
    "yui_combo.php",
    "pluginfile.php",
    "draftfile.php",
]

# Unanchored on purpose: "/file.php/x" and "/a.png?v=1" count as having an extension
SERVED_EXTENSION_RE = re.compile(
    r"\.php|\.html|\.js$|\.css$|\.jpe?g|\.png|\.gif|\.svg", re.IGNORECASE
)
SCRIPT_EXTENSION_RE = re.compile(r"\.php|\.html|\.js$", re.IGNORECASE)


class MoodleDriver(BasicDriver):

    name = "moodle"
    static_scripts = STATIC_SCRIPTS

    def serves(self, site_path: PathLike, site_name: str, uri: str) -> bool:
        site_path = Path(site_path)
        return (
            (site_path / "config-dist.php").exists()
            and (site_path / "course").exists()
            and (site_path / "grade").exists()
        )

    def is_static_file(self, site_path: PathLike, site_name: str, uri: str):
        static_file_path = f"{site_path}{uri}"
        if Path(static_file_path).exists():
            return static_file_path
        return None

    def classify(self, uri: str):
        lowered = uri.lower()
        for script in self.static_scripts:
            position = lowered.find(script)
            if position == -1 or lowered.endswith(script):
                continue
            end = position + len(script)
            return StaticBoundary(prefix=uri[:end], rest=uri[end:])

        if not uri or not SERVED_EXTENSION_RE.search(uri):
            return IndexFallback(f"{uri}/index.php")
        return PassThrough(uri)

    def front_controller_path(self, site_path: PathLike, site_name: str, decision) -> FrontController:
        uri = decision.uri
        server = {
            "SERVER_SOFTWARE": "PHP",
            "PHP_SELF": uri,
            "SERVER_ADDR": "127.0.0.1",
        }

        if isinstance(decision, StaticBoundary):
            server["PATH_INFO"] = uri
            return FrontController(f"{site_path}{decision.prefix}", path_info=uri, server=server)

        if (not uri or not SCRIPT_EXTENSION_RE.search(uri)) and not self.is_static_file(site_path, site_name, uri):
            return FrontController(self.as_php_index_file_in_directory(site_path, uri), server=server)

        return FrontController(f"{site_path}{uri}", server=server)
