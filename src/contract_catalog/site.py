"""
Static site generation for the contract catalog.

Builds the domain tree, renders every page, and writes the site:

    output/
        index.html
        architecture.html
        assets/redoc.standalone.js        (when a Redoc bundle is configured)
        <domain>/architecture.html
        <domain>/<service>/<contract>.html
        asyncapi-docs/<domain>/<service>/<contract>/   (AsyncAPI generator)

Two external tools are optional:

- ``datacontract`` (datacontract-cli) exports richer HTML for ODCS data
  contracts. If it is missing or fails, the built-in template is used,
  except under CI where a failed export aborts the run.
- ``npx @asyncapi/generator`` produces full AsyncAPI documentation that
  event pages link to.

Usage:
    from contract_catalog.site import SiteConfig, SiteGenerator

    config = SiteConfig.from_environment()
    SiteGenerator('contracts', 'output', config).generate()
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from contract_catalog.colors import Colors, kind_str, outcome_str
from contract_catalog.models import DataContract, Domain, EventContract
from contract_catalog.templates import (
    REDOC_BUNDLE,
    contract_href,
    render_api_page,
    render_architecture,
    render_data_page,
    render_domain_architecture,
    render_event_page,
    render_index,
)
from contract_catalog.tree import build_domains, count_contracts

logger = logging.getLogger(__name__)

# Environment variables that mark a CI run
CI_ENV_VARS = ('CI', 'GITHUB_ACTIONS', 'GITLAB_CI', 'BUILDKITE', 'JENKINS_URL', 'TF_BUILD')

REDOC_ENV_VAR = 'CONTRACT_CATALOG_REDOC'

DATACONTRACT_CLI = 'datacontract'
ASYNCAPI_GENERATOR = ['npx', '@asyncapi/generator']
ASYNCAPI_TEMPLATE = '@asyncapi/html-template'


class DataContractExportError(RuntimeError):
    """datacontract-cli failed while running under CI."""


# ============================================================================
# Environment probes
# ============================================================================

def detect_ci(environ=None) -> bool:
    """True when any well-known CI variable is set to a truthy value."""
    environ = os.environ if environ is None else environ
    for name in CI_ENV_VARS:
        value = environ.get(name, '').strip().lower()
        if value and value not in ('false', '0', 'no'):
            return True
    return False


def probe_datacontract_cli() -> bool:
    """Check once whether datacontract-cli is installed and runs."""
    if shutil.which(DATACONTRACT_CLI) is None:
        return False
    try:
        result = subprocess.run(
            [DATACONTRACT_CLI, '--version'],
            capture_output=True,
            text=True,
        )
    except OSError as e:
        logger.debug(f"datacontract --version failed: {e}")
        return False
    return result.returncode == 0


def probe_asyncapi_generator() -> bool:
    """The AsyncAPI generator runs through npx; its presence is enough."""
    return shutil.which(ASYNCAPI_GENERATOR[0]) is not None


@dataclass
class SiteConfig:
    """Settings for one generation run.

    Tool availability is probed once, in ``from_environment``, and then
    passed around as plain values.
    """
    datacontract_cli_available: bool = False
    ci: bool = False
    asyncapi_docs: bool = False
    redoc_bundle: Optional[Path] = None
    clean: bool = False

    def __post_init__(self):
        if self.redoc_bundle is not None:
            self.redoc_bundle = Path(self.redoc_bundle)

    @classmethod
    def from_environment(cls, environ=None, use_datacontract_cli: bool = True,
                         asyncapi_docs: bool = True, redoc_bundle=None,
                         clean: bool = False) -> 'SiteConfig':
        """Probe tools and read environment settings.

        Args:
            environ: Mapping to read instead of os.environ (tests)
            use_datacontract_cli: Allow datacontract-cli when installed
            asyncapi_docs: Run the AsyncAPI generator when npx is available
            redoc_bundle: Redoc script to ship; defaults to $CONTRACT_CATALOG_REDOC
            clean: Remove the output directory before writing
        """
        environ = os.environ if environ is None else environ
        if redoc_bundle is None and environ.get(REDOC_ENV_VAR):
            redoc_bundle = environ[REDOC_ENV_VAR]

        return cls(
            datacontract_cli_available=use_datacontract_cli and probe_datacontract_cli(),
            ci=detect_ci(environ),
            asyncapi_docs=asyncapi_docs and probe_asyncapi_generator(),
            redoc_bundle=redoc_bundle,
            clean=clean,
        )


# ============================================================================
# External tools
# ============================================================================

def _first_line(text: str) -> str:
    text = (text or '').strip()
    return text.splitlines()[0] if text else ''


def export_data_contract(contract_path: Path, output_path: Path):
    """Render an ODCS contract to HTML with datacontract-cli.

    Raises:
        RuntimeError: if the tool exits non-zero
        OSError: if the tool cannot be started
    """
    result = subprocess.run(
        [DATACONTRACT_CLI, 'export', str(contract_path), '--format', 'html',
         '--output', str(output_path)],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        message = _first_line(result.stderr) or _first_line(result.stdout)
        raise RuntimeError(f"exit status {result.returncode}: {message or 'no output'}")


def generate_asyncapi_docs(contract_path: Path, output_path: Path):
    """Run the official AsyncAPI HTML generator for one contract.

    Raises:
        RuntimeError: if the generator exits non-zero
        OSError: if npx cannot be started
    """
    output_path.mkdir(parents=True, exist_ok=True)
    result = subprocess.run(
        ASYNCAPI_GENERATOR + [str(contract_path), ASYNCAPI_TEMPLATE,
                              '-o', str(output_path), '--force-write', '--disable-warning'],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        message = _first_line(result.stderr) or _first_line(result.stdout)
        raise RuntimeError(f"exit status {result.returncode}: {message or 'no output'}")


# ============================================================================
# Site generator
# ============================================================================

@dataclass
class SiteGenerator:
    """
    Renders a contracts directory into a static HTML site.
    """

    contracts_dir: Path = None
    output_dir: Path = None
    config: SiteConfig = None

    # Filled in by generate()
    domains: list = field(default_factory=list)

    def __post_init__(self):
        self.contracts_dir = Path(self.contracts_dir or 'contracts')
        self.output_dir = Path(self.output_dir or 'output')
        if self.config is None:
            self.config = SiteConfig()

    def _say(self, message: str, quiet: bool):
        if not quiet:
            print(message)

    def source_path(self, contract) -> Path:
        """Location of a contract's source file."""
        parts = [part for part in (contract.domain, contract.service) if part]
        return self.contracts_dir.joinpath(*parts, contract.file_name)

    def page_path(self, contract) -> Path:
        """Location of a contract's HTML page in the output directory."""
        return self.output_dir / contract_href(contract)

    def generate(self, quiet: bool = False) -> dict:
        """
        Build the whole site.

        Args:
            quiet: Suppress progress output

        Returns:
            Summary dict with domain/service/contract counts, pages written,
            data contracts exported with datacontract-cli, and AsyncAPI docs
            generated.

        Raises:
            DataContractExportError: if datacontract-cli fails under CI
            RuntimeError: if two contracts, or a contract and a generated page,
                map to the same output file
            OSError: if the output cannot be written
        """
        self._say(f"Scanning {self.contracts_dir}...", quiet)
        if self.config.datacontract_cli_available:
            self._say("  datacontract-cli detected - using it for ODCS data contract pages", quiet)
        else:
            self._say("  datacontract-cli not found - using built-in templates for data contracts", quiet)

        self.domains = build_domains(self.contracts_dir)
        self._check_page_paths()
        counts = count_contracts(self.domains)

        self._say(f"Found {counts['domains']} domain(s)", quiet)
        for domain in self.domains:
            self._say(
                f"  - {domain.display_name}: {len(domain.services)} service(s), "
                f"{domain.count('api')} {kind_str('api')}, "
                f"{domain.count('event')} {kind_str('event')}, "
                f"{domain.count('data')} {kind_str('data')}",
                quiet,
            )

        self._prepare_output_dir()

        summary = dict(counts)
        summary.update({'pages': 0, 'data_exports': 0, 'asyncapi_docs': 0})

        self._say("\nGenerating pages...", quiet)
        self._write_page(self.output_dir / 'index.html', render_index(self.domains))
        self._write_page(self.output_dir / 'architecture.html', render_architecture(self.domains))
        summary['pages'] += 2
        self._say(f"  {outcome_str('ok')} index.html", quiet)
        self._say(f"  {outcome_str('ok')} architecture.html", quiet)

        for domain in self.domains:
            self._write_page(self.output_dir / domain.name / 'architecture.html',
                             render_domain_architecture(domain))
            summary['pages'] += 1
            self._say(f"  {outcome_str('ok')} {domain.name}/architecture.html", quiet)

            for contract in domain.all_contracts():
                used_cli = self._render_contract(contract, quiet)
                summary['pages'] += 1
                if used_cli:
                    summary['data_exports'] += 1

        if self._copy_redoc_bundle():
            self._say(f"  {outcome_str('ok')} {REDOC_BUNDLE}", quiet)

        if self.config.asyncapi_docs:
            summary['asyncapi_docs'] = self._generate_asyncapi_docs(quiet)

        self._say(f"\n{Colors.GREEN}Static site generated{Colors.RESET} in {self.output_dir}/", quiet)
        return summary

    def _check_page_paths(self):
        """Fail before writing anything if two pages would share a file."""
        owners = {'index.html': 'the catalog index', 'architecture.html': 'the architecture overview'}
        for domain in self.domains:
            owners[f'{domain.name}/architecture.html'] = f'the {domain.name} domain architecture page'

        for domain in self.domains:
            for contract in domain.all_contracts():
                href = contract_href(contract)
                source = self.source_path(contract).relative_to(self.contracts_dir).as_posix()
                if href in owners:
                    raise RuntimeError(
                        f"Page {href} would be written for both {owners[href]} and {source}; rename one of them"
                    )
                owners[href] = source

    def _prepare_output_dir(self):
        if self.config.clean and self.output_dir.exists():
            output = self.output_dir.resolve()
            contracts = self.contracts_dir.resolve()
            if output == contracts or output in contracts.parents:
                raise RuntimeError(
                    f"Refusing to clean {self.output_dir}: it contains the contracts directory"
                )
            logger.info(f"Removing previous output: {self.output_dir}")
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _write_page(self, path: Path, content: str):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')

    def _render_contract(self, contract, quiet: bool) -> bool:
        """Write one contract page. Returns True if datacontract-cli produced it."""
        page = self.page_path(contract)
        href = contract_href(contract)

        if isinstance(contract, DataContract):
            if contract.is_structured and self.config.datacontract_cli_available:
                if self._export_with_cli(contract, page, quiet):
                    self._say(f"  {outcome_str('ok')} {href} (datacontract-cli)", quiet)
                    return True
            self._write_page(page, render_data_page(contract))
        elif isinstance(contract, EventContract):
            self._write_page(page, render_event_page(contract))
        else:
            self._write_page(page, render_api_page(contract))

        self._say(f"  {outcome_str('ok')} {href}", quiet)
        return False

    def _export_with_cli(self, contract: DataContract, page: Path, quiet: bool) -> bool:
        source = self.source_path(contract)
        page.parent.mkdir(parents=True, exist_ok=True)
        try:
            export_data_contract(source, page)
        except (RuntimeError, OSError) as e:
            if self.config.ci:
                raise DataContractExportError(
                    f"datacontract-cli export failed for {source}: {e}"
                ) from e
            logger.warning(f"datacontract-cli export failed for {source}: {e}")
            self._say(f"  {outcome_str('fallback')} {contract_href(contract)}: "
                      "datacontract-cli failed, using built-in template", quiet)
            return False
        return True

    def _copy_redoc_bundle(self) -> bool:
        bundle = self.config.redoc_bundle
        if bundle is None:
            return False
        if not bundle.is_file():
            logger.warning(f"Redoc bundle not found: {bundle}")
            return False
        target = self.output_dir / REDOC_BUNDLE
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(bundle, target)
        return True

    def _generate_asyncapi_docs(self, quiet: bool) -> int:
        """Run the AsyncAPI generator for every event contract. Returns successes."""
        events = [c for domain in self.domains for c in domain.all_contracts()
                  if isinstance(c, EventContract)]
        if not events:
            return 0

        self._say(f"\nGenerating AsyncAPI documentation for {len(events)} contract(s)...", quiet)
        generated = 0
        for contract in events:
            parts = [part for part in (contract.domain, contract.service) if part]
            target = self.output_dir.joinpath('asyncapi-docs', *parts, contract.doc_name)
            label = '/'.join(parts + [contract.doc_name])
            try:
                generate_asyncapi_docs(self.source_path(contract), target)
            except (RuntimeError, OSError) as e:
                logger.warning(f"AsyncAPI generator failed for {label}: {e}")
                self._say(f"  {outcome_str('failed')} {label}", quiet)
                continue
            generated += 1
            self._say(f"  {outcome_str('ok')} {label}", quiet)
        return generated


def domain_summary(domain: Domain) -> dict:
    """Plain-data view of a domain, for JSON output."""
    def contract_entry(contract):
        entry = {
            'kind': contract.kind,
            'title': contract.title,
            'file': contract.file_name,
            'page': contract_href(contract),
        }
        version = getattr(contract, 'version', None)
        if version:
            entry['version'] = version
        if isinstance(contract, DataContract):
            entry['standard'] = contract.schema_standard
        return entry

    return {
        'name': domain.name,
        'display_name': domain.display_name,
        'contracts': [contract_entry(c) for c in domain.contracts],
        'services': [
            {
                'name': service.name,
                'display_name': service.display_name,
                'contracts': [contract_entry(c) for c in service.contracts],
            }
            for service in domain.services
        ],
    }
