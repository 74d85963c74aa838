"""Move every secured site to a new top-level domain."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from . import nginx
from .errors import DevhostsError

logger = logging.getLogger(__name__)


@dataclass
class RenameResult:
    renamed: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def rename_url(url: str, old: str, new: str) -> str:
    suffix = f".{old}"
    if url.endswith(suffix):
        return f"{url[: -len(suffix)]}.{new}"
    return url


class DomainRenameCoordinator:
    """Re-issue certificates and configs for all secured sites under a new domain.

    All sites are revoked before any is re-secured. A site that fails to
    re-secure is left unsecured and reported; the others carry on.
    """

    def __init__(self, manager):
        self.manager = manager

    def rename(self, old: str, new: str) -> RenameResult:
        result = RenameResult()
        if not self.manager.store.secured():
            return result

        snapshot: Dict[str, Optional[str]] = {
            url: self.manager.nginx.read(url) for url in self.manager.store.secured()
        }

        for url in snapshot:
            self.manager.unsecure_url(url)

        for url, site_conf in snapshot.items():
            new_url = rename_url(url, old, new)
            if nginx.is_proxy(site_conf):
                site_conf = nginx.replace_domain(site_conf, url, new_url)
            else:
                site_conf = None

            try:
                self.manager.secure_url(new_url, site_conf)
            except DevhostsError as e:
                logger.warning(f"Could not secure {new_url}: {e}")
                result.failed[new_url] = str(e)
                continue

            result.renamed[url] = new_url

        return result
