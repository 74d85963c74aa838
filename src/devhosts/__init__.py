"""devhosts - Serve local project directories as local HTTPS sites."""

__version__ = "0.4.0"

# Export programmatic API
from .manager import SiteManager
from .sites import Site, SiteRegistry
from .ssl import CertificateAuthority, CertificateStore, RootAuthority
from .domain import DomainRenameCoordinator, RenameResult
from .router import Route, resolve_request
from .errors import (
    DevhostsError,
    AmbiguousReference,
    InvalidUpstream,
    ExternalToolFailure,
    FilesystemFailure,
    SiteNotFound,
)

__all__ = [
    "SiteManager",
    "Site",
    "SiteRegistry",
    "CertificateAuthority",
    "CertificateStore",
    "RootAuthority",
    "DomainRenameCoordinator",
    "RenameResult",
    "Route",
    "resolve_request",
    "DevhostsError",
    "AmbiguousReference",
    "InvalidUpstream",
    "ExternalToolFailure",
    "FilesystemFailure",
    "SiteNotFound",
]
