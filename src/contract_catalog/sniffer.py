"""
Content sniffing for contract files.

Works out what a file is from what it contains, not from where it lives:
OpenAPI and AsyncAPI documents carry a top-level version marker, ODCS data
contracts carry ``kind: DataContract`` plus ``apiVersion``, and legacy
JSON-Schema data contracts carry ``$schema`` or ``title``.
"""

import json
from typing import Any

import yaml

CONTRACT_EXTENSIONS = ('.yaml', '.yml', '.json')
YAML_EXTENSIONS = ('.yaml', '.yml')

# Classification results
OPENAPI = 'openapi'
ASYNCAPI = 'asyncapi'
DATA = 'data'
UNKNOWN = 'unknown'


class ContractParseError(ValueError):
    """Raised when a contract file is not valid YAML/JSON."""


def load_document(content: str, extension: str) -> Any:
    """Parse file content according to its extension.

    Args:
        content: Raw file text
        extension: File suffix including the dot (case-insensitive)

    Returns:
        The parsed document (usually a dict)

    Raises:
        ContractParseError: if the content is malformed or the extension
            is not a contract extension
    """
    ext = extension.lower()
    try:
        if ext in YAML_EXTENSIONS:
            return yaml.safe_load(content)
        if ext == '.json':
            return json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ContractParseError(f"Malformed {ext} document: {e}") from e
    raise ContractParseError(f"Unsupported contract extension: {extension!r}")


def is_structured_data_contract(document: Any, extension: str) -> bool:
    """True for ODCS documents: YAML with kind DataContract and an apiVersion."""
    return (
        extension.lower() in YAML_EXTENSIONS
        and isinstance(document, dict)
        and document.get('kind') == 'DataContract'
        and 'apiVersion' in document
        and document.get('apiVersion') is not None
    )


def classify(document: Any, extension: str) -> str:
    """Classify an already-parsed document.

    The structured data contract markers are checked first so an ODCS file
    never passes for an API description. After that OpenAPI wins over
    AsyncAPI, and the loose legacy data contract check comes last.
    """
    if not isinstance(document, dict):
        return UNKNOWN

    if is_structured_data_contract(document, extension):
        return DATA
    if document.get('openapi'):
        return OPENAPI
    if document.get('asyncapi'):
        return ASYNCAPI
    if document.get('$schema') or document.get('title'):
        return DATA

    return UNKNOWN


def detect_contract_type(content: str, extension: str) -> str:
    """Classify raw file content. Never raises: bad input is 'unknown'."""
    try:
        document = load_document(content, extension)
    except ContractParseError:
        return UNKNOWN
    return classify(document, extension)
