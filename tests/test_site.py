"""
Tests for static site generation.
"""

import json
import subprocess

import pytest

from contract_catalog import site
from contract_catalog.site import (
    DataContractExportError,
    SiteConfig,
    SiteGenerator,
    detect_ci,
    domain_summary,
    probe_datacontract_cli,
)
from contract_catalog.tree import build_domains
from tests.conftest import ORDER_EVENTS_ASYNCAPI, ORDERS_OPENAPI, write_file


def _snapshot(root):
    """Map of relative path -> bytes for every file under root."""
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob('*'))
        if path.is_file()
    }


class FakeRun:
    """Stand-in for subprocess.run that records calls."""

    def __init__(self, returncode=0, stderr='', write_output=False):
        self.returncode = returncode
        self.stderr = stderr
        self.write_output = write_output
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.write_output and '--output' in cmd:
            output = cmd[cmd.index('--output') + 1]
            with open(output, 'w', encoding='utf-8') as f:
                f.write('<html>exported</html>')
        return subprocess.CompletedProcess(cmd, self.returncode, stdout='', stderr=self.stderr)


class TestGenerate:
    """Tests for SiteGenerator.generate"""

    def test_writes_expected_pages(self, sample_contracts, output_dir):
        summary = SiteGenerator(sample_contracts, output_dir).generate(quiet=True)

        assert (output_dir / 'index.html').is_file()
        assert (output_dir / 'architecture.html').is_file()
        assert (output_dir / 'sales' / 'architecture.html').is_file()
        assert (output_dir / 'sales' / 'orders-service' / 'orders-api.html').is_file()
        assert (output_dir / 'sales' / 'orders-service' / 'order-events.html').is_file()
        assert (output_dir / 'sales' / 'orders-service' / 'orders.html').is_file()
        assert (output_dir / 'sales' / 'customer-service' / 'customer.html').is_file()
        assert not (output_dir / 'empty-domain').exists()

        assert summary == {
            'domains': 1, 'services': 2, 'api': 1, 'event': 1, 'data': 2,
            'pages': 7, 'data_exports': 0, 'asyncapi_docs': 0,
        }

    def test_orders_api_page(self, contracts_dir, output_dir):
        write_file(contracts_dir, 'sales/orders-service/orders-api.yaml', ORDERS_OPENAPI)

        SiteGenerator(contracts_dir, output_dir).generate(quiet=True)

        page = (output_dir / 'sales' / 'orders-service' / 'orders-api.html').read_text(encoding='utf-8')
        assert '<title>Orders API - API Contract</title>' in page
        index = (output_dir / 'index.html').read_text(encoding='utf-8')
        assert 'href="sales/orders-service/orders-api.html"' in index

    def test_flat_layout_pages(self, contracts_dir, output_dir):
        write_file(contracts_dir, 'billing/invoices-api.yaml', ORDERS_OPENAPI)

        SiteGenerator(contracts_dir, output_dir).generate(quiet=True)

        assert (output_dir / 'billing' / 'invoices-api.html').is_file()

    def test_output_is_reproducible(self, sample_contracts, temp_dir):
        first = temp_dir / 'first'
        second = temp_dir / 'second'

        SiteGenerator(sample_contracts, first).generate(quiet=True)
        SiteGenerator(sample_contracts, second).generate(quiet=True)

        assert _snapshot(first) == _snapshot(second)

    def test_regenerate_in_place(self, sample_contracts, output_dir):
        SiteGenerator(sample_contracts, output_dir).generate(quiet=True)
        before = _snapshot(output_dir)
        SiteGenerator(sample_contracts, output_dir).generate(quiet=True)
        assert _snapshot(output_dir) == before

    def test_missing_contracts_dir(self, temp_dir, output_dir):
        summary = SiteGenerator(temp_dir / 'nope', output_dir).generate(quiet=True)

        assert summary['domains'] == 0
        assert summary['pages'] == 2
        index = (output_dir / 'index.html').read_text(encoding='utf-8')
        assert 'No contracts found' in index

    def test_list_valued_asyncapi_sections(self, contracts_dir, output_dir):
        """A loosely written AsyncAPI file still gets a page next to its siblings."""
        write_file(contracts_dir, 'sales/orders/events.yaml',
                   'asyncapi: 2.6.0\ninfo:\n  title: Loose Events\nservers:\n  - url: kafka:9092\n')
        write_file(contracts_dir, 'sales/orders/orders-api.yaml', ORDERS_OPENAPI)

        summary = SiteGenerator(contracts_dir, output_dir).generate(quiet=True)

        assert summary['event'] == 1
        page = (output_dir / 'sales' / 'orders' / 'events.html').read_text(encoding='utf-8')
        assert 'Loose Events' in page
        assert (output_dir / 'sales' / 'orders' / 'orders-api.html').is_file()

    def test_progress_output(self, sample_contracts, output_dir, capsys):
        SiteGenerator(sample_contracts, output_dir).generate()
        out = capsys.readouterr().out
        assert 'Found 1 domain(s)' in out
        assert 'sales/orders-service/orders-api.html' in out

    def test_quiet(self, sample_contracts, output_dir, capsys):
        SiteGenerator(sample_contracts, output_dir).generate(quiet=True)
        assert capsys.readouterr().out == ''


class TestPagePathClashes:
    """Tests for contracts that would overwrite another page"""

    def test_flat_contract_named_architecture(self, contracts_dir, output_dir):
        write_file(contracts_dir, 'sales/architecture.yaml', ORDERS_OPENAPI)
        write_file(contracts_dir, 'sales/orders/orders-api.yaml', ORDERS_OPENAPI)

        with pytest.raises(RuntimeError) as exc_info:
            SiteGenerator(contracts_dir, output_dir).generate(quiet=True)

        message = str(exc_info.value)
        assert 'sales/architecture.html' in message
        assert 'sales/architecture.yaml' in message
        assert not output_dir.exists()

    def test_same_stem_different_extension(self, contracts_dir, output_dir):
        write_file(contracts_dir, 'sales/orders/orders.yaml', ORDERS_OPENAPI)
        write_file(contracts_dir, 'sales/orders/orders.json', json.dumps({'title': 'Orders'}))

        with pytest.raises(RuntimeError) as exc_info:
            SiteGenerator(contracts_dir, output_dir).generate(quiet=True)

        message = str(exc_info.value)
        assert 'sales/orders/orders.html' in message
        assert 'orders.json' in message
        assert 'orders.yaml' in message

    def test_service_contract_named_architecture_is_fine(self, contracts_dir, output_dir):
        write_file(contracts_dir, 'sales/orders/architecture.yaml', ORDERS_OPENAPI)

        SiteGenerator(contracts_dir, output_dir).generate(quiet=True)

        domain_page = (output_dir / 'sales' / 'architecture.html').read_text(encoding='utf-8')
        assert 'Domain Architecture' in domain_page
        assert (output_dir / 'sales' / 'orders' / 'architecture.html').is_file()


class TestCleanOutput:
    """Tests for the clean option"""

    def test_clean_removes_stale_files(self, sample_contracts, output_dir):
        output_dir.mkdir()
        stale = write_file(output_dir, 'old/page.html', 'stale')

        SiteGenerator(sample_contracts, output_dir, SiteConfig(clean=True)).generate(quiet=True)

        assert not stale.exists()
        assert (output_dir / 'index.html').is_file()

    def test_without_clean_stale_files_remain(self, sample_contracts, output_dir):
        output_dir.mkdir()
        stale = write_file(output_dir, 'old/page.html', 'stale')

        SiteGenerator(sample_contracts, output_dir).generate(quiet=True)

        assert stale.exists()

    def test_refuses_to_clean_contracts_dir(self, sample_contracts):
        generator = SiteGenerator(sample_contracts, sample_contracts, SiteConfig(clean=True))
        with pytest.raises(RuntimeError):
            generator.generate(quiet=True)
        assert (sample_contracts / 'sales' / 'orders-service' / 'orders-api.yaml').is_file()

    def test_refuses_to_clean_parent_of_contracts(self, sample_contracts):
        generator = SiteGenerator(sample_contracts, sample_contracts.parent, SiteConfig(clean=True))
        with pytest.raises(RuntimeError):
            generator.generate(quiet=True)
        assert sample_contracts.is_dir()


class TestDataContractExport:
    """Tests for the datacontract-cli path"""

    def test_successful_export(self, sample_contracts, output_dir, monkeypatch):
        fake = FakeRun(write_output=True)
        monkeypatch.setattr(site.subprocess, 'run', fake)

        config = SiteConfig(datacontract_cli_available=True)
        summary = SiteGenerator(sample_contracts, output_dir, config).generate(quiet=True)

        assert summary['data_exports'] == 1
        # Only the ODCS contract goes through the CLI
        assert len(fake.calls) == 1
        assert fake.calls[0][:2] == ['datacontract', 'export']
        assert fake.calls[0][2].endswith('orders.yaml')
        page = output_dir / 'sales' / 'orders-service' / 'orders.html'
        assert page.read_text(encoding='utf-8') == '<html>exported</html>'

    def test_failure_falls_back_to_template(self, sample_contracts, output_dir, monkeypatch):
        monkeypatch.setattr(site.subprocess, 'run', FakeRun(returncode=1, stderr='boom'))

        config = SiteConfig(datacontract_cli_available=True, ci=False)
        summary = SiteGenerator(sample_contracts, output_dir, config).generate(quiet=True)

        assert summary['data_exports'] == 0
        page = (output_dir / 'sales' / 'orders-service' / 'orders.html').read_text(encoding='utf-8')
        assert 'Standard: ODCS' in page

    def test_failure_is_fatal_under_ci(self, sample_contracts, output_dir, monkeypatch):
        monkeypatch.setattr(site.subprocess, 'run', FakeRun(returncode=1, stderr='boom'))

        config = SiteConfig(datacontract_cli_available=True, ci=True)
        with pytest.raises(DataContractExportError) as exc_info:
            SiteGenerator(sample_contracts, output_dir, config).generate(quiet=True)

        assert 'orders.yaml' in str(exc_info.value)
        assert 'boom' in str(exc_info.value)

    def test_tool_not_startable_falls_back(self, sample_contracts, output_dir, monkeypatch):
        def missing(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(site.subprocess, 'run', missing)

        config = SiteConfig(datacontract_cli_available=True)
        summary = SiteGenerator(sample_contracts, output_dir, config).generate(quiet=True)

        assert summary['data_exports'] == 0
        assert (output_dir / 'sales' / 'orders-service' / 'orders.html').is_file()

    def test_not_used_when_unavailable(self, sample_contracts, output_dir, monkeypatch):
        fake = FakeRun()
        monkeypatch.setattr(site.subprocess, 'run', fake)

        SiteGenerator(sample_contracts, output_dir, SiteConfig()).generate(quiet=True)

        assert fake.calls == []


class TestAsyncAPIDocs:
    """Tests for the AsyncAPI generator step"""

    def test_generator_invocation(self, contracts_dir, output_dir, monkeypatch):
        write_file(contracts_dir, 'sales/orders-service/order-events.yaml', ORDER_EVENTS_ASYNCAPI)
        fake = FakeRun()
        monkeypatch.setattr(site.subprocess, 'run', fake)

        summary = SiteGenerator(contracts_dir, output_dir, SiteConfig(asyncapi_docs=True)).generate(quiet=True)

        assert summary['asyncapi_docs'] == 1
        cmd = fake.calls[0]
        assert cmd[:2] == ['npx', '@asyncapi/generator']
        assert '@asyncapi/html-template' in cmd
        target = output_dir / 'asyncapi-docs' / 'sales' / 'orders-service' / 'order-events'
        assert cmd[cmd.index('-o') + 1] == str(target)
        assert target.is_dir()

    def test_generator_failure_is_skipped(self, contracts_dir, output_dir, monkeypatch):
        write_file(contracts_dir, 'sales/orders-service/order-events.yaml', ORDER_EVENTS_ASYNCAPI)
        monkeypatch.setattr(site.subprocess, 'run', FakeRun(returncode=1, stderr='npm ERR!'))

        summary = SiteGenerator(contracts_dir, output_dir, SiteConfig(asyncapi_docs=True)).generate(quiet=True)

        assert summary['asyncapi_docs'] == 0
        assert (output_dir / 'sales' / 'orders-service' / 'order-events.html').is_file()


class TestRedocBundle:
    """Tests for shipping the Redoc script"""

    def test_bundle_copied(self, sample_contracts, output_dir, temp_dir):
        bundle = write_file(temp_dir, 'vendor/redoc.js', '/* redoc */')

        SiteGenerator(sample_contracts, output_dir, SiteConfig(redoc_bundle=bundle)).generate(quiet=True)

        copied = output_dir / 'assets' / 'redoc.standalone.js'
        assert copied.read_text(encoding='utf-8') == '/* redoc */'

    def test_missing_bundle_is_a_warning(self, sample_contracts, output_dir, temp_dir):
        config = SiteConfig(redoc_bundle=temp_dir / 'missing.js')
        SiteGenerator(sample_contracts, output_dir, config).generate(quiet=True)
        assert not (output_dir / 'assets').exists()


class TestEnvironment:
    """Tests for CI detection and tool probing"""

    @pytest.mark.parametrize('environ,expected', [
        ({}, False),
        ({'CI': 'true'}, True),
        ({'CI': '1'}, True),
        ({'CI': 'false'}, False),
        ({'CI': '0'}, False),
        ({'CI': ''}, False),
        ({'GITHUB_ACTIONS': 'true'}, True),
        ({'GITLAB_CI': 'true'}, True),
    ])
    def test_detect_ci(self, environ, expected):
        assert detect_ci(environ) is expected

    def test_from_environment_without_tools(self, monkeypatch):
        monkeypatch.setattr(site.shutil, 'which', lambda name: None)

        config = SiteConfig.from_environment(environ={'CI': 'true', 'CONTRACT_CATALOG_REDOC': '/opt/redoc.js'})

        assert config.ci is True
        assert config.datacontract_cli_available is False
        assert config.asyncapi_docs is False
        assert str(config.redoc_bundle) == '/opt/redoc.js'

    def test_from_environment_with_tools(self, monkeypatch):
        monkeypatch.setattr(site.shutil, 'which', lambda name: f'/usr/bin/{name}')
        monkeypatch.setattr(site.subprocess, 'run', FakeRun())

        config = SiteConfig.from_environment(environ={})

        assert config.ci is False
        assert config.datacontract_cli_available is True
        assert config.asyncapi_docs is True

    def test_tools_disabled_by_flags(self, monkeypatch):
        fake = FakeRun()
        monkeypatch.setattr(site.shutil, 'which', lambda name: f'/usr/bin/{name}')
        monkeypatch.setattr(site.subprocess, 'run', fake)

        config = SiteConfig.from_environment(environ={}, use_datacontract_cli=False, asyncapi_docs=False)

        assert config.datacontract_cli_available is False
        assert config.asyncapi_docs is False
        assert fake.calls == []

    def test_probe_rejects_broken_cli(self, monkeypatch):
        monkeypatch.setattr(site.shutil, 'which', lambda name: '/usr/bin/datacontract')
        monkeypatch.setattr(site.subprocess, 'run', FakeRun(returncode=2))
        assert probe_datacontract_cli() is False


class TestDomainSummary:
    """Tests for the JSON view of a domain"""

    def test_summary(self, sample_contracts):
        summary = domain_summary(build_domains(sample_contracts)[0])

        assert summary['name'] == 'sales'
        assert summary['display_name'] == 'Sales'
        assert summary['contracts'] == []
        orders = summary['services'][1]
        assert orders['name'] == 'orders-service'
        api = orders['contracts'][0]
        assert api == {
            'kind': 'api',
            'title': 'Orders API',
            'file': 'orders-api.yaml',
            'page': 'sales/orders-service/orders-api.html',
            'version': '2.1.0',
        }
        data = orders['contracts'][2]
        assert data['standard'] == 'structured'
