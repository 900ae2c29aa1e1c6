"""
HTML page templates for the contract catalog.

Every function here is pure: it takes normalized records (or domains) and
returns a complete HTML document as a string. All values coming from
contract files go through ``escape_html``; documents embedded in inline
scripts go through ``escape_script_json``.

Pages written under a service directory live two levels below the site
root, pages of flat-layout contracts one level below. Links are built
relative to that position so the site works from any base URL.
"""

import html
import json
import re

from contract_catalog.models import ApiContract, DataContract, Domain, EventContract

SITE_NAME = 'Contract Catalog'
REDOC_BUNDLE = 'assets/redoc.standalone.js'
MERMAID_MODULE = 'https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.esm.min.mjs'

_SCRIPT_ESCAPES = {
    '<': '\\u003c',
    '>': '\\u003e',
    '/': '\\/',
    '\u2028': '\\u2028',
    '\u2029': '\\u2029',
}
_SCRIPT_UNSAFE = re.compile('[<>/\u2028\u2029]')


# ============================================================================
# Escaping
# ============================================================================

def escape_html(value, quote: bool = True) -> str:
    """Escape a value for HTML text or attribute context.

    Escapes ``& < > " '``. None renders as an empty string; other
    non-strings are converted with str() first.

    Args:
        value: Value to escape
        quote: Also escape quotes (needed inside attributes). Plain text
            blocks such as <pre> dumps may pass False.
    """
    if value is None:
        return ''
    return html.escape(value if isinstance(value, str) else str(value), quote=quote)


def escape_script_json(document) -> str:
    """Serialize a document for embedding inside an inline <script>.

    Besides JSON encoding, escapes ``< > /`` and the U+2028/U+2029 line
    separators so the payload cannot close the script element or break
    the surrounding JavaScript. Values JSON cannot represent (YAML dates)
    are written as strings.
    """
    payload = json.dumps(document if document is not None else {},
                         ensure_ascii=False, default=str)
    return _SCRIPT_UNSAFE.sub(lambda m: _SCRIPT_ESCAPES[m.group(0)], payload)


def _json_text(value, indent: int = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def _items(value) -> list:
    """List-valued document field; anything else reads as empty."""
    return value if isinstance(value, list) else []


# ============================================================================
# Shared layout
# ============================================================================

BASE_CSS = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
            line-height: 1.6;
            color: #333;
            background: #f5f5f5;
        }
        header {
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            color: white;
            padding: 2rem;
            box-shadow: 0 2px 4px rgba(0,0,0,0.1);
        }
        .header-content { max-width: 1200px; margin: 0 auto; }
        header h1 { font-size: 2rem; margin-bottom: 0.5rem; }
        header p, header .version { opacity: 0.9; }
        .nav-link { display: inline-block; color: white; text-decoration: none; margin-bottom: 1rem; opacity: 0.9; }
        .nav-link:hover { opacity: 1; text-decoration: underline; }
        .container { max-width: 1200px; margin: 0 auto; padding: 2rem; }
        .section {
            background: white;
            margin-bottom: 2rem;
            padding: 2rem;
            border-radius: 8px;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
        }
        .section h2 {
            color: #667eea;
            margin-bottom: 1rem;
            font-size: 1.5rem;
            border-bottom: 2px solid #667eea;
            padding-bottom: 0.5rem;
        }
        .section h3 { color: #555; margin: 1.5rem 0 0.75rem; }
        code { font-family: 'Courier New', monospace; }
        pre {
            background: #2d2d2d;
            color: #f8f8f2;
            padding: 1rem;
            border-radius: 4px;
            overflow-x: auto;
            font-size: 0.9rem;
        }
        footer { text-align: center; padding: 2rem; color: #666; font-size: 0.9rem; }
"""

INDEX_CSS = """
        .domain { margin-bottom: 2.5rem; }
        .domain h2 { color: #444; margin-bottom: 1rem; }
        .service h3 { color: #667eea; margin: 1rem 0 0.75rem; }
        .contract-grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(300px, 1fr));
            gap: 1.5rem;
        }
        .contract-card {
            background: white;
            border-radius: 8px;
            padding: 1.5rem;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
        }
        .contract-card h4 { margin: 0.5rem 0 0.25rem; }
        .contract-card .version { color: #888; font-size: 0.85rem; }
        .contract-card .description { color: #666; font-size: 0.9rem; margin: 0.5rem 0 1rem; }
        .contract-link { color: #667eea; font-weight: 600; text-decoration: none; }
        .contract-link:hover { text-decoration: underline; }
        .badge {
            display: inline-block;
            padding: 0.2rem 0.6rem;
            border-radius: 4px;
            font-size: 0.75rem;
            font-weight: bold;
            color: white;
        }
        .badge-api { background: #49cc90; }
        .badge-event { background: #fca130; }
        .badge-data { background: #9b59b6; }
        .empty-state { color: #888; font-style: italic; }
        .top-nav a { color: white; margin-right: 1.5rem; }
"""

EVENT_CSS = """
        .asyncapi-link {
            display: inline-block;
            background: #667eea;
            color: white;
            padding: 0.75rem 1.5rem;
            border-radius: 6px;
            text-decoration: none;
            margin-bottom: 2rem;
            font-weight: 600;
        }
        .server-item, .channel {
            background: #f9f9f9;
            border-left: 4px solid #fca130;
            padding: 1rem;
            margin-bottom: 1rem;
            border-radius: 4px;
        }
        .server-name, .channel-name { font-family: 'Courier New', monospace; font-weight: bold; color: #fca130; }
        .server-url { color: #666; }
        .channel-description { color: #666; margin-top: 0.25rem; }
"""

DATA_CSS = """
        .metadata { display: flex; gap: 1rem; flex-wrap: wrap; margin-top: 0.5rem; font-size: 0.9rem; }
        .metadata-item { background: rgba(255,255,255,0.2); padding: 0.25rem 0.75rem; border-radius: 12px; }
        .info-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(250px, 1fr)); gap: 1rem; }
        .info-item { background: #f9f9f9; padding: 1rem; border-radius: 4px; }
        .info-label { font-weight: bold; color: #667eea; }
        .tag { display: inline-block; background: #e8eaf6; color: #3f51b5; padding: 0.2rem 0.6rem; border-radius: 12px; font-size: 0.8rem; margin-right: 0.5rem; }
        .property {
            background: #f9f9f9;
            border-left: 4px solid #49cc90;
            padding: 1rem;
            margin-bottom: 1rem;
            border-radius: 4px;
        }
        .property-header { display: flex; align-items: center; gap: 0.5rem; flex-wrap: wrap; }
        .property-name { font-family: 'Courier New', monospace; font-size: 1.1rem; color: #49cc90; font-weight: bold; }
        .property-type, .property-description, .property-meta { color: #666; font-size: 0.9rem; }
        .badge { display: inline-block; color: white; padding: 0.2rem 0.5rem; border-radius: 4px; font-size: 0.75rem; }
        .badge.required { background: #f93e3e; }
        .badge.primary-key { background: #667eea; }
        .badge.unique { background: #fca130; }
        .quality-rules { background: #f0f9ff; border-left: 4px solid #667eea; padding: 1rem; margin: 0.75rem 0; border-radius: 4px; }
        .quality-rule { background: white; padding: 0.75rem; border-radius: 4px; margin-bottom: 0.5rem; }
        .severity { padding: 0.1rem 0.4rem; border-radius: 3px; font-size: 0.75rem; background: #ffc; }
        .severity.error { background: #fee; }
        .schema-info { background: #f0f0f0; padding: 1rem; border-radius: 4px; }
"""

ARCHITECTURE_CSS = """
        nav { background: white; padding: 1rem 2rem; box-shadow: 0 2px 4px rgba(0,0,0,0.1); position: sticky; top: 0; z-index: 100; }
        nav a { color: #667eea; text-decoration: none; margin-right: 1.5rem; font-weight: 600; }
        .mermaid { background: #fafafa; padding: 20px; border-radius: 4px; margin: 20px 0; display: flex; justify-content: center; }
        .info-box { background: #e8f4f8; border-left: 4px solid #3498db; padding: 15px; margin: 20px 0; border-radius: 4px; }
        .info-box ul { margin: 0.5rem 0 0 1.5rem; }
        .card-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(300px, 1fr)); gap: 1.5rem; margin-top: 1rem; }
        .card { background: #f9f9f9; border: 1px solid #e0e0e0; border-radius: 6px; padding: 1.5rem; }
        .card h4 { color: #667eea; margin-bottom: 0.5rem; }
        .card ul { list-style: none; margin-top: 0.5rem; }
        .card li { padding: 0.25rem 0; color: #666; }
        .contract-list a {
            display: block;
            color: #667eea;
            text-decoration: none;
            padding: 0.5rem;
            margin: 0.25rem 0;
            background: white;
            border-radius: 4px;
            border: 1px solid #e0e0e0;
        }
"""


def _page(title: str, body: list, css: str = '', head: list = None) -> str:
    """Wrap body lines in the common HTML document shell.

    ``title`` must already be escaped.
    """
    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '    <meta charset="UTF-8">',
        '    <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f'    <title>{title}</title>',
    ]
    lines.extend(head or [])
    lines.extend([
        '    <style>' + BASE_CSS + css + '    </style>',
        '</head>',
        '<body>',
    ])
    lines.extend(body)
    lines.extend([
        '</body>',
        '</html>',
        '',
    ])
    return '\n'.join(lines)


def _footer() -> list:
    return ['<footer>', f'    <p>Generated by {SITE_NAME}</p>', '</footer>']


def _root_prefix(contract) -> str:
    """Relative path from a contract page back to the site root."""
    return '../../' if contract.service else '../'


def contract_href(contract) -> str:
    """Path of a contract page relative to the site root."""
    parts = [part for part in (contract.domain, contract.service) if part]
    parts.append(contract.page_name)
    return '/'.join(parts)


def asyncapi_docs_href(contract: EventContract) -> str:
    """Path of the generated AsyncAPI docs for a contract, from the site root."""
    parts = ['asyncapi-docs']
    parts.extend(part for part in (contract.domain, contract.service) if part)
    parts.extend([contract.doc_name, 'index.html'])
    return '/'.join(parts)


def _back_link(prefix: str) -> str:
    return f'        <a href="{prefix}index.html" class="nav-link">&larr; Back to Catalog</a>'


def _section(heading: str, content: list, section_id: str = '') -> list:
    id_attr = f' id="{section_id}"' if section_id else ''
    lines = [f'    <div class="section"{id_attr}>', f'        <h2>{heading}</h2>']
    lines.extend(content)
    lines.append('    </div>')
    return lines


# ============================================================================
# Index
# ============================================================================

_KIND_LABELS = {
    'api': ('OpenAPI', 'badge-api'),
    'event': ('AsyncAPI', 'badge-event'),
    'data': ('Data Contract', 'badge-data'),
}


def _contract_card(contract) -> list:
    label, badge_class = _KIND_LABELS[contract.kind]
    if contract.kind == 'data' and contract.is_structured:
        label = 'ODCS'

    lines = [
        '                <div class="contract-card">',
        f'                    <span class="badge {badge_class}">{label}</span>',
        f'                    <h4>{escape_html(contract.title)}</h4>',
    ]
    if getattr(contract, 'version', None):
        lines.append(f'                    <div class="version">Version: {escape_html(contract.version)}</div>')
    lines.extend([
        f'                    <div class="description">{escape_html(contract.description)}</div>',
        f'                    <a class="contract-link" href="{escape_html(contract_href(contract))}">View Details &rarr;</a>',
        '                </div>',
    ])
    return lines


def _contract_grid(contracts: list) -> list:
    lines = ['            <div class="contract-grid">']
    for contract in contracts:
        lines.extend(_contract_card(contract))
    lines.append('            </div>')
    return lines


def render_index(domains: list) -> str:
    """Render the catalog landing page listing every contract by domain and service."""
    body = [
        '<header>',
        '    <div class="header-content">',
        f'        <h1>{SITE_NAME}</h1>',
        '        <p>Architecture documentation from API, Event, and Data Contracts</p>',
        '        <p class="top-nav"><a href="architecture.html">Architecture Overview</a></p>',
        '    </div>',
        '</header>',
        '<div class="container">',
    ]

    if not domains:
        body.append('    <div class="empty-state">No contracts found</div>')

    for domain in domains:
        body.extend([
            f'    <div class="domain" id="{escape_html(domain.name)}">',
            f'        <h2>{escape_html(domain.display_name)}</h2>',
        ])
        if domain.contracts:
            body.extend(_contract_grid(domain.contracts))
        for service in domain.services:
            body.extend([
                '        <div class="service">',
                f'            <h3>{escape_html(service.display_name)}</h3>',
            ])
            body.extend(_contract_grid(service.contracts))
            body.append('        </div>')
        body.append('    </div>')

    body.append('</div>')
    body.extend(_footer())
    return _page(SITE_NAME, body, INDEX_CSS)


# ============================================================================
# API pages
# ============================================================================

def render_api_page(contract: ApiContract) -> str:
    """Render an OpenAPI contract with Redoc, embedding the full document."""
    prefix = _root_prefix(contract)
    spec_json = escape_script_json(contract.raw_document)
    title = escape_html(contract.title)

    body = [
        '<header>',
        '    <div class="header-content">',
        _back_link(prefix),
        f'        <h1>{title}</h1>',
        f'        <div class="version">Version: {escape_html(contract.version)}</div>',
        '    </div>',
        '</header>',
        '<div class="redoc-container"></div>',
        f'<script src="{prefix}{REDOC_BUNDLE}" onerror="handleScriptError()"></script>',
        '<script>',
        '    function handleScriptError() {',
        "        const container = document.querySelector('.redoc-container');",
        "        container.innerHTML = '<div class=\"container\"><div class=\"section\"><h2>Documentation Failed to Load</h2>' +",
        "            '<p>The Redoc bundle could not be loaded. Regenerate the site with a Redoc bundle configured.</p></div></div>';",
        '    }',
        '    function initRedoc() {',
        "        if (typeof Redoc === 'undefined') {",
        '            handleScriptError();',
        '            return;',
        '        }',
        f'        const spec = {spec_json};',
        '        if (!spec || !spec.openapi) {',
        "            handleScriptError();",
        '            return;',
        '        }',
        "        Redoc.init(spec, {scrollYOffset: 70, theme: {colors: {primary: {main: '#667eea'}}}},",
        "                   document.querySelector('.redoc-container'));",
        '    }',
        "    if (document.readyState === 'loading') {",
        "        document.addEventListener('DOMContentLoaded', initRedoc);",
        '    } else {',
        '        initRedoc();',
        '    }',
        '</script>',
    ]
    return _page(f'{title} - API Contract', body)


# ============================================================================
# Event pages
# ============================================================================

def _operation_summary(operation) -> str:
    if isinstance(operation, dict):
        return operation.get('summary') or operation.get('description') or 'Event'
    return 'Event'


def render_event_page(contract: EventContract) -> str:
    """Render an AsyncAPI contract: servers, channels and a link to the full docs."""
    prefix = _root_prefix(contract)
    title = escape_html(contract.title)

    body = [
        '<header>',
        '    <div class="header-content">',
        _back_link(prefix),
        f'        <h1>{title}</h1>',
        f'        <div class="version">Version: {escape_html(contract.version)}</div>',
        '    </div>',
        '</header>',
        '<div class="container">',
        f'    <a href="{escape_html(prefix + asyncapi_docs_href(contract))}" class="asyncapi-link">'
        'View Complete AsyncAPI Documentation &rarr;</a>',
    ]

    if contract.description:
        body.extend(_section('Description', [f'        <p>{escape_html(contract.description)}</p>']))

    if contract.servers:
        servers = []
        for name, server in contract.servers.items():
            server = server if isinstance(server, dict) else {}
            servers.extend([
                '        <div class="server-item">',
                f'            <div class="server-name">{escape_html(name)}</div>',
                f'            <div class="server-url">{escape_html(server.get("url"))}'
                f' ({escape_html(server.get("protocol"))})</div>',
            ])
            if server.get('description'):
                servers.append(f'            <div>{escape_html(server["description"])}</div>')
            servers.append('        </div>')
        body.extend(_section('Servers', servers))

    channels = []
    for name, channel in contract.channels.items():
        channel = channel if isinstance(channel, dict) else {}
        channels.extend([
            '        <div class="channel">',
            f'            <div class="channel-name">{escape_html(name)}</div>',
        ])
        if channel.get('description'):
            channels.append(f'            <div class="channel-description">{escape_html(channel["description"])}</div>')
        if channel.get('publish'):
            channels.append('            <div class="channel-description"><strong>Publishes:</strong> '
                            f'{escape_html(_operation_summary(channel["publish"]))}</div>')
        if channel.get('subscribe'):
            channels.append('            <div class="channel-description"><strong>Subscribes:</strong> '
                            f'{escape_html(_operation_summary(channel["subscribe"]))}</div>')
        channels.append('        </div>')
    if not channels:
        channels.append('        <p>No channels defined.</p>')
    body.extend(_section('Channels', channels))

    body.append('</div>')
    return _page(f'{title} - Event Contract', body, EVENT_CSS)


# ============================================================================
# Data pages
# ============================================================================

def render_data_page(contract: DataContract) -> str:
    """Render a data contract using the layout for its schema standard."""
    if contract.is_structured:
        return _render_structured_data_page(contract)
    return _render_legacy_data_page(contract)


def _quality_rules(rules, heading: str) -> list:
    rules = _items(rules)
    if not rules:
        return []
    lines = ['        <div class="quality-rules">', f'            <h4>{heading}</h4>']
    for rule in rules:
        if not isinstance(rule, dict):
            continue
        lines.append('            <div class="quality-rule">')
        if rule.get('metric'):
            lines.append(f'                <div><strong>{escape_html(rule["metric"])}</strong></div>')
        if rule.get('description'):
            lines.append(f'                <div>{escape_html(rule["description"])}</div>')
        if rule.get('dimension'):
            lines.append(f'                <div>Dimension: {escape_html(rule["dimension"])}</div>')
        if rule.get('value') is not None:
            unit = f' {escape_html(rule["unit"])}' if rule.get('unit') else ''
            lines.append(f'                <div>Value: {escape_html(rule["value"])}{unit}</div>')
        if rule.get('severity'):
            severity_class = 'severity error' if rule['severity'] == 'error' else 'severity'
            lines.append(f'                <div><span class="{severity_class}">{escape_html(rule["severity"])}</span></div>')
        lines.append('            </div>')
    lines.append('        </div>')
    return lines


def _property_block(prop: dict) -> list:
    lines = [
        '        <div class="property">',
        '            <div class="property-header">',
        f'                <span class="property-name">{escape_html(prop.get("name"))}</span>',
    ]
    if prop.get('required'):
        lines.append('                <span class="badge required">REQUIRED</span>')
    if prop.get('primaryKey'):
        lines.append('                <span class="badge primary-key">PRIMARY KEY</span>')
    if prop.get('unique'):
        lines.append('                <span class="badge unique">UNIQUE</span>')
    lines.append('            </div>')

    if prop.get('businessName'):
        lines.append(f'            <div class="property-meta">{escape_html(prop["businessName"])}</div>')
    physical = f' ({escape_html(prop["physicalType"])})' if prop.get('physicalType') else ''
    lines.append(f'            <div class="property-type">Type: <strong>'
                 f'{escape_html(prop.get("logicalType") or "unknown")}</strong>{physical}</div>')
    if prop.get('description'):
        lines.append(f'            <div class="property-description">{escape_html(prop["description"])}</div>')
    if prop.get('classification'):
        lines.append(f'            <div class="property-meta">Classification: '
                     f'<strong>{escape_html(prop["classification"])}</strong></div>')
    if prop.get('examples'):
        examples = ', '.join(f'<code>{escape_html(_json_text(example))}</code>'
                             for example in _items(prop['examples']))
        lines.append(f'            <div class="property-meta">Examples: {examples}</div>')
    lines.extend(_quality_rules(prop.get('quality'), 'Quality Rules'))
    lines.append('        </div>')
    return lines


def _table_section(table: dict) -> list:
    content = []
    if table.get('description'):
        content.append(f'        <p>{escape_html(table["description"])}</p>')
    if table.get('tags'):
        tags = ''.join(f'<span class="tag">{escape_html(tag)}</span>' for tag in _items(table['tags']))
        content.append(f'        <div>{tags}</div>')

    info = []
    if table.get('physicalName'):
        info.append('            <div class="info-item"><div class="info-label">Physical Name</div>'
                    f'<div><code>{escape_html(table["physicalName"])}</code></div></div>')
    if table.get('physicalType'):
        info.append('            <div class="info-item"><div class="info-label">Type</div>'
                    f'<div>{escape_html(table["physicalType"])}</div></div>')
    if info:
        content.append('        <div class="info-grid">')
        content.extend(info)
        content.append('        </div>')

    content.extend(_quality_rules(table.get('quality'), 'Table Quality Rules'))

    properties = [prop for prop in _items(table.get('properties')) if isinstance(prop, dict)]
    if properties:
        content.append('        <h3>Properties</h3>')
        for prop in properties:
            content.extend(_property_block(prop))

    return _section(escape_html(table.get('businessName') or table.get('name')), content)


def _render_structured_data_page(contract: DataContract) -> str:
    prefix = _root_prefix(contract)
    title = escape_html(contract.title)

    metadata = []
    if contract.version:
        metadata.append(f'<span class="metadata-item">Version: {escape_html(contract.version)}</span>')
    if contract.domain:
        metadata.append(f'<span class="metadata-item">Domain: {escape_html(contract.domain)}</span>')
    if contract.status:
        metadata.append(f'<span class="metadata-item">Status: {escape_html(contract.status)}</span>')
    metadata.append('<span class="metadata-item">Standard: ODCS</span>')

    body = [
        '<header>',
        '    <div class="header-content">',
        _back_link(prefix),
        f'        <h1>{title}</h1>',
        f'        <div class="metadata">{"".join(metadata)}</div>',
        '    </div>',
        '</header>',
        '<div class="container">',
    ]

    if contract.description:
        body.extend(_section('Description', [f'        <p>{escape_html(contract.description)}</p>']))

    team = contract.team if isinstance(contract.team, dict) else None
    if team:
        content = [
            '        <div class="info-grid">',
            '            <div class="info-item"><div class="info-label">Team Name</div>'
            f'<div>{escape_html(team.get("name") or "N/A")}</div></div>',
        ]
        if team.get('description'):
            content.append('            <div class="info-item"><div class="info-label">Description</div>'
                           f'<div>{escape_html(team["description"])}</div></div>')
        content.append('        </div>')
        members = [m for m in _items(team.get('members')) if isinstance(m, dict)]
        if members:
            content.append('        <h3>Team Members</h3>')
            for member in members:
                since = f' (since {escape_html(member["dateIn"])})' if member.get('dateIn') else ''
                content.append(f'        <div class="info-item"><strong>{escape_html(member.get("username"))}</strong>'
                               f' - {escape_html(member.get("role"))}{since}</div>')
        body.extend(_section('Team', content))

    for table in contract.schema or []:
        if isinstance(table, dict):
            body.extend(_table_section(table))

    if contract.roles:
        content = []
        for role in contract.roles:
            if not isinstance(role, dict):
                continue
            content.append('        <div class="info-item">')
            content.append(f'            <div class="info-label">{escape_html(role.get("role"))}</div>')
            content.append(f'            <div>Access: <strong>{escape_html(role.get("access"))}</strong></div>')
            if role.get('description'):
                content.append(f'            <div>{escape_html(role["description"])}</div>')
            content.append('        </div>')
        body.extend(_section('Roles &amp; Access', content))

    if contract.sla_properties:
        content = ['        <div class="info-grid">']
        for sla in contract.sla_properties:
            if not isinstance(sla, dict):
                continue
            unit = f' {escape_html(sla["unit"])}' if sla.get('unit') else ''
            content.append('            <div class="info-item">')
            content.append(f'                <div class="info-label">{escape_html(sla.get("property"))}</div>')
            content.append(f'                <div>{escape_html(sla.get("value"))}{unit}</div>')
            if sla.get('description'):
                content.append(f'                <div>{escape_html(sla["description"])}</div>')
            content.append('            </div>')
        content.append('        </div>')
        body.extend(_section('Service Level Agreement', content))

    if contract.quality:
        body.extend(_section('Data Quality', _quality_rules(contract.quality, 'Contract Quality Rules')))

    if contract.support:
        content = ['        <div class="info-grid">']
        for channel in contract.support:
            if not isinstance(channel, dict):
                continue
            content.append('            <div class="info-item">'
                           f'<div class="info-label">{escape_html(channel.get("channel") or "Contact")}</div>'
                           f'<div>{escape_html(channel.get("value") or channel.get("url"))}</div></div>')
        content.append('        </div>')
        body.extend(_section('Support &amp; Contact', content))

    body.append('</div>')
    return _page(f'{title} - Data Contract (ODCS)', body, DATA_CSS)


def _render_legacy_data_page(contract: DataContract) -> str:
    prefix = _root_prefix(contract)
    title = escape_html(contract.title)
    schema = contract.schema if isinstance(contract.schema, dict) else {}

    body = [
        '<header>',
        '    <div class="header-content">',
        _back_link(prefix),
        f'        <h1>{title}</h1>',
        '    </div>',
        '</header>',
        '<div class="container">',
    ]

    if contract.description:
        body.extend(_section('Description', [f'        <p>{escape_html(contract.description)}</p>']))

    if schema.get('$schema') or schema.get('$id'):
        content = ['        <div class="schema-info">']
        if schema.get('$schema'):
            content.append(f'            <div><span class="info-label">Schema:</span> {escape_html(schema["$schema"])}</div>')
        if schema.get('$id'):
            content.append(f'            <div><span class="info-label">ID:</span> {escape_html(schema["$id"])}</div>')
        content.append('        </div>')
        body.extend(_section('Schema Information', content))

    properties = schema.get('properties')
    if isinstance(properties, dict) and properties:
        required = _items(schema.get('required'))
        content = []
        for name, prop in properties.items():
            prop = prop if isinstance(prop, dict) else {}
            badge = ' <span class="badge required">REQUIRED</span>' if name in required else ''
            type_line = f'Type: {escape_html(prop.get("type") or "any")}'
            if prop.get('format'):
                type_line += f' (format: {escape_html(prop["format"])})'
            if isinstance(prop.get('enum'), list):
                allowed = ', '.join(escape_html(_json_text(value)) for value in prop['enum'])
                type_line += f' - Allowed values: {allowed}'
            content.extend([
                '        <div class="property">',
                f'            <div class="property-name">{escape_html(name)}{badge}</div>',
                f'            <div class="property-type">{type_line}</div>',
            ])
            if prop.get('description'):
                content.append(f'            <div class="property-description">{escape_html(prop["description"])}</div>')
            content.append('        </div>')
        body.extend(_section('Properties', content))

    # Text context only, so quotes stay readable in the dump
    dump = escape_html(_json_text(contract.schema, indent=2), quote=False)
    body.extend(_section('Full Schema', [f'        <pre>{dump}</pre>']))

    body.append('</div>')
    return _page(f'{title} - Data Contract', body, DATA_CSS)


# ============================================================================
# Architecture pages
# ============================================================================

def _node_id(domain: str, service: str) -> str:
    """Mermaid node id for a service (sales, order-service -> SVC_SALES__ORDER_SERVICE).

    Scoped by domain and prefixed so it never matches an infrastructure node.
    """
    def clean(name):
        return re.sub(r'[^A-Za-z0-9_]', '_', name.upper())
    return f'SVC_{clean(domain)}__{clean(service)}'


def _mermaid_head() -> list:
    return [
        '    <script type="module">',
        f"        import mermaid from '{MERMAID_MODULE}';",
        "        mermaid.initialize({ startOnLoad: true, theme: 'default' });",
        '    </script>',
    ]


def system_overview_diagram(domains: list) -> str:
    """Mermaid graph of every service grouped by domain, wired to shared infrastructure."""
    has_events = any(service.event_contracts for domain in domains for service in domain.services)

    lines = ['graph TB']
    for domain in domains:
        lines.append(f'    subgraph "{domain.display_name} Domain"')
        for service in domain.services:
            lines.append(f'        {_node_id(domain.name, service.name)}[{service.display_name}]')
        lines.append('    end')

    lines.extend(['    subgraph "Infrastructure"', '        API[API Gateway]', '        DB[(Databases)]'])
    if has_events:
        lines.append('        KAFKA[Event Bus]')
    lines.append('    end')

    for domain in domains:
        for service in domain.services:
            node = _node_id(domain.name, service.name)
            lines.append(f'    API --> {node}')
            lines.append(f'    {node} --> DB')
            if service.event_contracts:
                lines.append(f'    {node} -.->|Events| KAFKA')

    for idx, domain in enumerate(domains):
        color = '#e1f5ff' if idx % 2 == 0 else '#fff4e1'
        for service in domain.services:
            lines.append(f'    style {_node_id(domain.name, service.name)} fill:{color}')
    if has_events:
        lines.append('    style KAFKA fill:#f0f0f0')

    return '\n'.join(lines)


def domain_diagram(domain: Domain) -> str:
    """Mermaid graph of one domain's services and the contract families they expose."""
    has_apis = domain.count('api') > 0
    has_events = domain.count('event') > 0
    has_data = domain.count('data') > 0

    lines = ['graph LR', f'    subgraph "{domain.display_name} Domain"', '        direction TB']
    for service in domain.services:
        lines.append(f'        {_node_id(domain.name, service.name)}[{service.display_name}]')
    lines.extend(['        subgraph "Data Storage"', '            DB[(Database)]', '        end'])
    if has_events:
        lines.extend(['        subgraph "Event Publishing"', '            EVENTS[Event Streams]', '        end'])
    lines.append('    end')

    for service in domain.services:
        node = _node_id(domain.name, service.name)
        lines.append(f'    {node} --> DB')
        if service.event_contracts:
            lines.append(f'    {node} -.->|Publishes| EVENTS')

    if has_apis or has_events or has_data:
        lines.append('    subgraph "Contracts"')
        if has_apis:
            lines.append('        APIS[REST APIs<br/>OpenAPI]')
        if has_events:
            lines.append('        ASYNC[Event Streams<br/>AsyncAPI]')
        if has_data:
            lines.append('        DATA[Data Schemas<br/>Data Contracts]')
        lines.append('    end')

    for service in domain.services:
        lines.append(f'    style {_node_id(domain.name, service.name)} fill:#4a90e2')
    if has_apis:
        lines.append('    style APIS fill:#90EE90')
    if has_events:
        lines.append('    style ASYNC fill:#FFB347')
        lines.append('    style EVENTS fill:#FFB347')
    if has_data:
        lines.append('    style DATA fill:#DDA0DD')

    return '\n'.join(lines)


def _summary_box(heading: str, domains: list) -> list:
    services = sum(len(domain.services) for domain in domains)
    return [
        '        <div class="info-box">',
        f'            <strong>{heading}</strong>',
        '            <ul>',
        f'                <li><strong>Domains:</strong> {len(domains)}</li>',
        f'                <li><strong>Services:</strong> {services}</li>',
        f'                <li><strong>APIs:</strong> {sum(d.count("api") for d in domains)} OpenAPI specification(s)</li>',
        f'                <li><strong>Events:</strong> {sum(d.count("event") for d in domains)} AsyncAPI specification(s)</li>',
        f'                <li><strong>Data Contracts:</strong> {sum(d.count("data") for d in domains)}</li>',
        '            </ul>',
        '        </div>',
    ]


def render_architecture(domains: list) -> str:
    """Render the system-wide architecture overview page."""
    body = [
        '<header>',
        '    <div class="header-content">',
        '        <h1>Architecture Overview</h1>',
        '        <p>Domains, services, and their interactions</p>',
        '    </div>',
        '</header>',
        '<nav>',
        '    <a href="index.html">&larr; Back to Catalog</a>',
        '    <a href="#system-overview">System Overview</a>',
        '    <a href="#domains">Domains</a>',
        '</nav>',
        '<div class="container">',
    ]

    overview = [
        f'        <p>The catalog is organized into {len(domains)} domain(s).</p>',
        '        <div class="mermaid">',
        escape_html(system_overview_diagram(domains), quote=False),
        '        </div>',
    ]
    overview.extend(_summary_box('Architecture Highlights:', domains))
    body.extend(_section('System Overview', overview, 'system-overview'))

    cards = ['        <div class="card-grid">']
    for domain in domains:
        cards.extend([
            '            <div class="card">',
            f'                <h4>{escape_html(domain.display_name)}</h4>',
            f'                <p>{len(domain.services)} service(s)</p>',
            '                <ul>',
        ])
        for service in domain.services:
            cards.append(f'                    <li>{escape_html(service.display_name)}</li>')
        cards.extend([
            '                </ul>',
            f'                <a href="{escape_html(domain.name)}/architecture.html">View Domain Architecture &rarr;</a>',
            '            </div>',
        ])
    cards.append('        </div>')
    body.extend(_section('Domain Architecture', cards, 'domains'))

    body.append('</div>')
    body.extend(_footer())
    return _page(f'Architecture Overview - {SITE_NAME}', body, ARCHITECTURE_CSS, _mermaid_head())


def _contract_links(contracts: list, base: str = '') -> list:
    lines = ['                <div class="contract-list">']
    for contract in contracts:
        href = base + contract.page_name
        lines.append(f'                    <a href="{escape_html(href)}">{escape_html(contract.title)}</a>')
    lines.append('                </div>')
    return lines


def render_domain_architecture(domain: Domain) -> str:
    """Render ``<domain>/architecture.html`` for a single domain."""
    name = escape_html(domain.display_name)
    body = [
        '<header>',
        '    <div class="header-content">',
        f'        <h1>{name} Domain</h1>',
        '        <p>Architecture and service documentation</p>',
        '    </div>',
        '</header>',
        '<nav>',
        '    <a href="../index.html">&larr; Back to Catalog</a>',
        '    <a href="../architecture.html">System Architecture</a>',
        '    <a href="#overview">Overview</a>',
        '    <a href="#services">Services</a>',
        '</nav>',
        '<div class="container">',
    ]

    overview = [
        f'        <p>The {name} domain contains {len(domain.services)} service(s).</p>',
        '        <div class="mermaid">',
        escape_html(domain_diagram(domain), quote=False),
        '        </div>',
    ]
    overview.extend(_summary_box('Domain Summary:', [domain]))
    body.extend(_section('Domain Architecture', overview, 'overview'))

    cards = ['        <div class="card-grid">']
    for service in domain.services:
        cards.extend([
            '            <div class="card">',
            f'                <h4>{escape_html(service.display_name)}</h4>',
            '                <ul>',
            f'                    <li>{len(service.api_contracts)} API contract(s)</li>',
            f'                    <li>{len(service.event_contracts)} event contract(s)</li>',
            f'                    <li>{len(service.data_contracts)} data contract(s)</li>',
            '                </ul>',
        ])
        cards.extend(_contract_links(service.contracts, f'{service.name}/'))
        cards.append('            </div>')
    if domain.contracts:
        cards.extend([
            '            <div class="card">',
            '                <h4>Domain Contracts</h4>',
        ])
        cards.extend(_contract_links(domain.contracts))
        cards.append('            </div>')
    cards.append('        </div>')
    body.extend(_section('Services', cards, 'services'))

    body.append('</div>')
    body.extend(_footer())
    return _page(f'{name} Architecture - {SITE_NAME}', body, ARCHITECTURE_CSS, _mermaid_head())
