"""
Normalized contract model.

Every contract file found in the catalog is turned into one of three
record types (API, event, data) and grouped into services and domains.
Renderers only ever see these records, never raw files.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

# Placeholder titles for documents without one
UNTITLED_API = 'Untitled API'
UNTITLED_EVENTS = 'Untitled Events'
UNTITLED_DATA = 'Untitled Data Contract'

DEFAULT_VERSION = '1.0.0'

# Data contract standards
STRUCTURED = 'structured'  # Open Data Contract Standard (kind: DataContract)
LEGACY = 'legacy'  # JSON-Schema style documents

_CONTRACT_SUFFIX = re.compile(r'\.(yaml|yml|json)$', re.IGNORECASE)


def display_name(name: str) -> str:
    """Turn a directory name into a human-readable title.

    >>> display_name('order-management')
    'Order Management'
    """
    return ' '.join(word[:1].upper() + word[1:] for word in name.split('-'))


def page_name_for(file_name: str) -> str:
    """Output page name for a contract file (orders-api.yaml -> orders-api.html)."""
    return _CONTRACT_SUFFIX.sub('', file_name) + '.html'


def doc_name_for(file_name: str) -> str:
    """Contract file name without its extension."""
    return _CONTRACT_SUFFIX.sub('', file_name)


@dataclass
class ContractRecord:
    """Fields shared by every contract kind."""
    title: str
    description: str
    file_name: str  # basename only
    domain: Optional[str] = None
    service: Optional[str] = None

    kind = 'unknown'

    def __post_init__(self):
        if not self.file_name:
            raise ValueError("Contract records need a file name")

    @property
    def page_name(self) -> str:
        return page_name_for(self.file_name)

    @property
    def doc_name(self) -> str:
        return doc_name_for(self.file_name)


@dataclass
class ApiContract(ContractRecord):
    """An OpenAPI document."""
    version: str = DEFAULT_VERSION
    paths: dict = field(default_factory=dict)  # {path: {method: operation}}
    servers: list = field(default_factory=list)  # [{url, description}]
    raw_document: dict = field(default_factory=dict)

    kind = 'api'


@dataclass
class EventContract(ContractRecord):
    """An AsyncAPI document."""
    version: str = DEFAULT_VERSION
    channels: dict = field(default_factory=dict)  # {channel_name: definition}
    servers: dict = field(default_factory=dict)  # {server_name: {url, protocol, description}}

    kind = 'event'


@dataclass
class DataContract(ContractRecord):
    """A data contract, either ODCS (structured) or JSON-Schema (legacy).

    For structured contracts ``schema`` is the ordered list of table
    definitions. For legacy contracts it is the whole parsed document.
    """
    schema_standard: str = LEGACY
    schema: Any = None
    version: Optional[str] = None
    status: Optional[str] = None
    data_product: Optional[str] = None
    team: Optional[dict] = None
    roles: Optional[list] = None
    sla_properties: Optional[list] = None
    support: Optional[list] = None
    quality: Optional[list] = None

    kind = 'data'

    @property
    def is_structured(self) -> bool:
        return self.schema_standard == STRUCTURED


@dataclass
class Service:
    """A service directory and the contracts it publishes."""
    name: str
    display_name: str = ''
    api_contracts: list = field(default_factory=list)
    event_contracts: list = field(default_factory=list)
    data_contracts: list = field(default_factory=list)

    def __post_init__(self):
        if not self.display_name:
            self.display_name = display_name(self.name)

    def add(self, contract: ContractRecord):
        """Append a contract to the list matching its kind."""
        _contract_list(self, contract.kind).append(contract)

    @property
    def contracts(self) -> list:
        """All contracts, APIs first, then events, then data."""
        return self.api_contracts + self.event_contracts + self.data_contracts

    def is_empty(self) -> bool:
        return not (self.api_contracts or self.event_contracts or self.data_contracts)


@dataclass
class Domain:
    """A top-level domain directory.

    Contracts normally live in services. Files placed directly in the
    domain directory (the older flat layout) are kept on the domain itself.
    """
    name: str
    display_name: str = ''
    services: list = field(default_factory=list)
    api_contracts: list = field(default_factory=list)
    event_contracts: list = field(default_factory=list)
    data_contracts: list = field(default_factory=list)

    def __post_init__(self):
        if not self.display_name:
            self.display_name = display_name(self.name)

    def add(self, contract: ContractRecord):
        _contract_list(self, contract.kind).append(contract)

    @property
    def contracts(self) -> list:
        """Contracts attached directly to the domain (flat layout only)."""
        return self.api_contracts + self.event_contracts + self.data_contracts

    def all_contracts(self) -> list:
        """Every contract in the domain, direct ones first, then per service."""
        result = list(self.contracts)
        for service in self.services:
            result.extend(service.contracts)
        return result

    def count(self, kind: str) -> int:
        """Number of contracts of one kind across the domain."""
        total = len(_contract_list(self, kind))
        for service in self.services:
            total += len(_contract_list(service, kind))
        return total

    def is_empty(self) -> bool:
        return not self.services and not self.contracts


def _contract_list(owner, kind: str) -> list:
    lists = {
        'api': owner.api_contracts,
        'event': owner.event_contracts,
        'data': owner.data_contracts,
    }
    if kind not in lists:
        raise ValueError(f"Unknown contract kind: {kind}")
    return lists[kind]
