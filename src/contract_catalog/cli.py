#!/usr/bin/env python3
"""
Contract Catalog CLI - static documentation for API, event and data contracts.

Usage:
    contract-catalog generate                      # contracts/ -> output/
    contract-catalog generate -c specs -o site     # Custom directories
    contract-catalog generate --clean              # Regenerate from scratch
    contract-catalog list                          # Show discovered contracts
    contract-catalog list --json                   # Same, as JSON
"""

import argparse
import json
import logging
import sys

from contract_catalog import __version__
from contract_catalog.colors import Colors, kind_str
from contract_catalog.site import SiteConfig, SiteGenerator, domain_summary
from contract_catalog.tree import build_domains, count_contracts

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )


# ============================================================================
# Commands
# ============================================================================

def cmd_generate(args) -> int:
    """Generate the static site."""
    config = SiteConfig.from_environment(
        use_datacontract_cli=not args.no_datacontract_cli,
        asyncapi_docs=not args.no_asyncapi_docs,
        redoc_bundle=args.redoc_bundle,
        clean=args.clean,
    )
    if config.ci:
        logger.info("CI environment detected - datacontract-cli failures are fatal")

    generator = SiteGenerator(
        contracts_dir=args.contracts,
        output_dir=args.output,
        config=config,
    )
    result = generator.generate(quiet=args.quiet)

    if not args.quiet:
        print(f"  Pages: {result['pages']}")
        if result['data_exports']:
            print(f"  datacontract-cli exports: {result['data_exports']}")
        if result['asyncapi_docs']:
            print(f"  AsyncAPI docs: {result['asyncapi_docs']}")
    return 0


def cmd_list(args) -> int:
    """Print the discovered domain/service tree."""
    domains = build_domains(args.contracts)

    if args.json:
        print(json.dumps({
            'totals': count_contracts(domains),
            'domains': [domain_summary(d) for d in domains],
        }, indent=2))
        return 0

    if not domains:
        print(f"No contracts found in {args.contracts}")
        return 0

    for domain in domains:
        print(f"{Colors.BOLD}{domain.display_name}{Colors.RESET} ({domain.name})")
        for contract in domain.contracts:
            print(f"  [{kind_str(contract.kind)}] {contract.title} - {contract.file_name}")
        for service in domain.services:
            print(f"  {service.display_name} ({service.name})")
            for contract in service.contracts:
                print(f"    [{kind_str(contract.kind)}] {contract.title} - {contract.file_name}")

    totals = count_contracts(domains)
    print(f"\n{totals['domains']} domain(s), {totals['services']} service(s): "
          f"{totals['api']} API, {totals['event']} event, {totals['data']} data contract(s)")
    return 0


# ============================================================================
# Main CLI
# ============================================================================

def main():
    parser = argparse.ArgumentParser(
        prog='contract-catalog',
        description='Contract Catalog - static docs for OpenAPI, AsyncAPI and data contracts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  contract-catalog generate                     Build output/ from contracts/
  contract-catalog generate -c specs -o site    Custom directories
  contract-catalog list --json                  Show discovered contracts
'''
    )
    parser.add_argument('--version', action='version', version=f'contract-catalog {__version__}')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command')

    # generate
    generate_p = subparsers.add_parser('generate', help='Generate the static site')
    generate_p.add_argument('--contracts', '-c', default='contracts', help='Contracts directory')
    generate_p.add_argument('--output', '-o', default='output', help='Output directory')
    generate_p.add_argument('--clean', action='store_true', help='Remove the output directory first')
    generate_p.add_argument('--no-asyncapi-docs', action='store_true',
                            help='Skip the AsyncAPI generator')
    generate_p.add_argument('--no-datacontract-cli', action='store_true',
                            help='Always use built-in data contract templates')
    generate_p.add_argument('--redoc-bundle', help='Redoc standalone script to copy into assets/')
    generate_p.add_argument('--quiet', '-q', action='store_true', help='Only report errors')

    # list
    list_p = subparsers.add_parser('list', help='List discovered contracts')
    list_p.add_argument('--contracts', '-c', default='contracts', help='Contracts directory')
    list_p.add_argument('--json', action='store_true', help='Output in JSON format')

    args = parser.parse_args()
    verbose = getattr(args, 'verbose', False)
    _configure_logging(verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == 'generate':
            sys.exit(cmd_generate(args))
        elif args.command == 'list':
            sys.exit(cmd_list(args))

    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
    except (RuntimeError, OSError) as e:
        print(f"✗ {e}", file=sys.stderr)
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
