"""
Domain/service tree assembly.

Expected layout::

    contracts/
        <domain>/
            <service>/
                orders-api.yaml
                order-events.yaml
                orders.json
            legacy-contract.yaml     # flat layout, attached to the domain

Each file is sniffed and parsed on its own. A broken file is logged and
skipped; it never stops the rest of the catalog from being built.
"""

import logging
from pathlib import Path
from typing import Optional

from contract_catalog.models import ContractRecord, Domain, Service
from contract_catalog.parsers import parse_contract
from contract_catalog.sniffer import CONTRACT_EXTENSIONS, UNKNOWN, classify, load_document

logger = logging.getLogger(__name__)


def _is_contract_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in CONTRACT_EXTENSIONS


def _list_dir(directory: Path) -> list:
    # Sorted so directory-read order is stable across filesystems
    return sorted(directory.iterdir(), key=lambda p: p.name)


def load_contract_file(path: Path, domain: Optional[str] = None,
                       service: Optional[str] = None) -> Optional[ContractRecord]:
    """Read, sniff and parse a single contract file.

    Returns:
        The normalized record, or None if the content is not a recognized
        contract.

    Raises:
        OSError, UnicodeDecodeError: if the file cannot be read
        ContractParseError: if the content is malformed
    """
    content = path.read_text(encoding='utf-8')
    document = load_document(content, path.suffix)
    contract_type = classify(document, path.suffix)
    if contract_type == UNKNOWN:
        logger.debug(f"Skipping unrecognized file: {path}")
        return None
    return parse_contract(contract_type, document, path.name, domain, service,
                          extension=path.suffix)


def _collect_contracts(directory: Path, owner, domain: str, service: Optional[str] = None):
    """Add every recognized contract file in ``directory`` to ``owner``."""
    for path in _list_dir(directory):
        if not _is_contract_file(path):
            continue
        try:
            contract = load_contract_file(path, domain, service)
        except Exception as e:
            logger.warning(f"Failed to parse {path}: {e}")
            continue
        if contract is not None:
            owner.add(contract)


def build_domain(domain_dir: Path) -> Domain:
    """Build one domain from its directory. The result may be empty."""
    domain = Domain(name=domain_dir.name)

    for entry in _list_dir(domain_dir):
        if not entry.is_dir():
            continue
        service = Service(name=entry.name)
        _collect_contracts(entry, service, domain.name, service.name)
        if service.is_empty():
            logger.debug(f"Skipping empty service: {domain.name}/{service.name}")
            continue
        domain.services.append(service)

    # Flat layout: contract files directly under the domain directory
    _collect_contracts(domain_dir, domain, domain.name)

    return domain


def build_domains(contracts_dir) -> list:
    """Scan a contracts directory and return its non-empty domains.

    Args:
        contracts_dir: Root directory; each subdirectory is a domain

    Returns:
        List of Domain in directory order. A missing root yields [].
    """
    root = Path(contracts_dir)
    if not root.is_dir():
        logger.info(f"Contracts directory not found: {root}")
        return []

    domains = []
    for entry in _list_dir(root):
        if not entry.is_dir():
            continue
        domain = build_domain(entry)
        if domain.is_empty():
            logger.debug(f"Skipping empty domain: {domain.name}")
            continue
        domains.append(domain)

    return domains


def count_contracts(domains: list) -> dict:
    """Totals across all domains, keyed by kind plus 'domains' and 'services'."""
    return {
        'domains': len(domains),
        'services': sum(len(d.services) for d in domains),
        'api': sum(d.count('api') for d in domains),
        'event': sum(d.count('event') for d in domains),
        'data': sum(d.count('data') for d in domains),
    }
