"""Map an inbound host and URI to the file that should answer it."""

import logging
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlsplit

from .config import Configuration
from .drivers import Driver, FrontController, StaticBoundary, find_driver
from .errors import SiteNotFound

logger = logging.getLogger(__name__)


@dataclass
class Route:
    site: str
    site_path: str
    driver: Driver
    static_file: Optional[str] = None
    front_controller: Optional[FrontController] = None


def site_name_for_host(host: str, domain: str) -> str:
    name = host.split(":", 1)[0].lower()
    suffix = f".{domain}"
    if name.endswith(suffix):
        name = name[: -len(suffix)]
    if name.startswith("www."):
        name = name[4:]
    # wildcard subdomains are served by the parent site
    return name.rsplit(".", 1)[-1]


def find_site_path(config: Configuration, site_name: str) -> Optional[str]:
    for path in config.get("paths", []):
        candidate = os.path.join(path, site_name)
        if os.path.isdir(candidate):
            return os.path.realpath(candidate)
    return None


def resolve_request(config: Configuration, host: str, uri: str) -> Route:
    site_name = site_name_for_host(host, config.domain)
    site_path = find_site_path(config, site_name)
    if site_path is None:
        raise SiteNotFound(host)

    uri = unquote(urlsplit(uri).path).rstrip("/") if uri else ""
    driver = find_driver(site_path, site_name, uri)
    decision = driver.classify(uri)
    route = Route(site=site_name, site_path=site_path, driver=driver)

    if not isinstance(decision, StaticBoundary) and not decision.uri.lower().endswith(".php"):
        route.static_file = driver.is_static_file(site_path, site_name, decision.uri)
    if route.static_file is None:
        route.front_controller = driver.front_controller_path(site_path, site_name, decision)

    logger.debug(f"{host}{uri} -> {route.static_file or route.front_controller.script} ({driver.name})")
    return route
