"""
Contract Catalog - static documentation for API, event and data contracts.

Scans a domain/service tree of OpenAPI, AsyncAPI and data contract files,
classifies each file by its content, and renders an HTML catalog with
per-contract pages and architecture overviews.
"""

__version__ = "0.1.0"

from contract_catalog.models import ApiContract, DataContract, Domain, EventContract, Service
from contract_catalog.site import SiteConfig, SiteGenerator
from contract_catalog.tree import build_domains

__all__ = [
    "ApiContract",
    "DataContract",
    "Domain",
    "EventContract",
    "Service",
    "SiteConfig",
    "SiteGenerator",
    "build_domains",
    "__version__",
]
