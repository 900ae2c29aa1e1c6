"""
Parsers that turn sniffed documents into normalized contract records.

All parsers are pure: they take the parsed document plus the file name and
the domain/service it was found in, and never touch the filesystem.
"""

from typing import Optional

from contract_catalog.models import (
    DEFAULT_VERSION,
    LEGACY,
    STRUCTURED,
    UNTITLED_API,
    UNTITLED_DATA,
    UNTITLED_EVENTS,
    ApiContract,
    ContractRecord,
    DataContract,
    EventContract,
)
from contract_catalog.sniffer import ASYNCAPI, DATA, OPENAPI, is_structured_data_contract


def _text(value, default: str = '') -> str:
    """Coerce a scalar document value to text; missing, empty or nested -> default."""
    if value is None or value == '' or isinstance(value, (dict, list)):
        return default
    return value if isinstance(value, str) else str(value)


def _mapping(value) -> dict:
    return value if isinstance(value, dict) else {}


def _sequence(value) -> list:
    return value if isinstance(value, list) else []


def _info(document: dict) -> dict:
    return _mapping(document.get('info'))


def parse_openapi_contract(document: dict, file_name: str,
                           domain: Optional[str] = None,
                           service: Optional[str] = None) -> ApiContract:
    """Build an API record from an OpenAPI document."""
    info = _info(document)
    return ApiContract(
        title=_text(info.get('title'), UNTITLED_API),
        description=_text(info.get('description')),
        file_name=file_name,
        domain=domain,
        service=service,
        version=_text(info.get('version'), DEFAULT_VERSION),
        paths=_mapping(document.get('paths')),
        servers=_sequence(document.get('servers')),
        raw_document=document,
    )


def parse_asyncapi_contract(document: dict, file_name: str,
                            domain: Optional[str] = None,
                            service: Optional[str] = None) -> EventContract:
    """Build an event record from an AsyncAPI document."""
    info = _info(document)
    return EventContract(
        title=_text(info.get('title'), UNTITLED_EVENTS),
        description=_text(info.get('description')),
        file_name=file_name,
        domain=domain,
        service=service,
        version=_text(info.get('version'), DEFAULT_VERSION),
        channels=_mapping(document.get('channels')),
        servers=_mapping(document.get('servers')),
    )


def parse_data_contract(document: dict, file_name: str,
                        domain: Optional[str] = None,
                        service: Optional[str] = None,
                        extension: str = '.json') -> DataContract:
    """Build a data record from an ODCS or JSON-Schema document.

    ODCS contracts (YAML with ``kind: DataContract`` and ``apiVersion``) are
    normalized into the structured shape. Everything else is treated as a
    legacy JSON-Schema contract whose schema is the document itself.
    """
    if is_structured_data_contract(document, extension):
        description = document.get('description')
        if isinstance(description, dict):
            description = description.get('purpose')

        return DataContract(
            title=_text(document.get('dataProduct') or document.get('title'), UNTITLED_DATA),
            description=_text(description),
            file_name=file_name,
            domain=domain,
            service=service,
            schema_standard=STRUCTURED,
            schema=_sequence(document.get('schema')),
            version=None if document.get('version') is None else _text(document.get('version')),
            status=_text(document.get('status')) or None,
            data_product=_text(document.get('dataProduct')) or None,
            team=_mapping(document.get('team')) or None,
            roles=_sequence(document.get('roles')),
            sla_properties=_sequence(document.get('slaProperties')),
            support=_sequence(document.get('support')),
            quality=_sequence(document.get('quality')),
        )

    return DataContract(
        title=_text(document.get('title'), UNTITLED_DATA),
        description=_text(document.get('description')),
        file_name=file_name,
        domain=domain,
        service=service,
        schema_standard=LEGACY,
        schema=document,
    )


def parse_contract(contract_type: str, document: dict, file_name: str,
                   domain: Optional[str] = None, service: Optional[str] = None,
                   extension: str = '.yaml') -> ContractRecord:
    """Dispatch a sniffed document to the parser for its kind."""
    if contract_type == OPENAPI:
        return parse_openapi_contract(document, file_name, domain, service)
    if contract_type == ASYNCAPI:
        return parse_asyncapi_contract(document, file_name, domain, service)
    if contract_type == DATA:
        return parse_data_contract(document, file_name, domain, service, extension)
    raise ValueError(f"Cannot parse contract of type {contract_type!r}")
