"""Main CLI entry point for depinventory."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .collector import collect_package_infos
from .compliance import find_invalid_package_content, find_missing_packages, has_copyright_holder
from .formatters import OutputFormatter
from .commands.stats import show_stats

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_level: Optional[str] = None):
    """Configure logging based on verbosity flags."""
    if log_level:
        level = getattr(logging, log_level.upper(), logging.WARNING)
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def read_allowed_licenses(args) -> List[str]:
    """Combine --allow values with the lines of --allow-file."""
    allowed = list(args.allow or [])
    if args.allow_file:
        with open(args.allow_file, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    allowed.append(line)
    return allowed


def accept_any_copyright(package) -> bool:
    """Copyright evaluation used when --require-copyright-holder is not given."""
    return True


def handle_create(args):
    """Handle the 'create' subcommand."""
    setup_logging(args.verbose, args.loglevel)

    logger.info(f"Product manifest: {args.package_json}")
    logger.info(f"Searching manifests in: {', '.join(args.node_modules)}")

    collected = collect_package_infos(args.package_json, args.node_modules, args.exact_versions)

    if collected.root is None:
        logger.warning(f"Product manifest {args.package_json} could not be parsed")
    for error in collected.invalid_packages:
        logger.warning(f"Unreadable manifest: {error.package_file_path}")

    try:
        if args.output_format == 'list':
            output = OutputFormatter.format_as_list(collected.packages)
        elif args.output_format == 'tree':
            output = OutputFormatter.format_as_tree(collected)
        elif args.output_format == 'licenses':
            output = OutputFormatter.format_as_license_report(collected)
        elif args.output_format == 'json':
            output = OutputFormatter.format_as_json(collected)
        else:  # sbom (default)
            output = OutputFormatter.format_as_sbom(collected)
    except Exception as e:
        logger.error(f"Error generating output: {e}")
        print(f"Error generating output: {e}", file=sys.stderr)
        return 1

    try:
        if args.output == '-':
            print(output, end='')
        else:
            with open(args.output, 'w') as f:
                f.write(output)
            logger.info(f"Output written to: {args.output}")
            print(f"Output written to: {args.output}")
    except OSError as e:
        logger.error(f"Error writing output: {e}")
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return 0


def handle_check(args):
    """Handle the 'check' subcommand."""
    setup_logging(args.verbose, args.loglevel)

    allowed_licenses = read_allowed_licenses(args)
    logger.info(f"Allowed licenses: {', '.join(allowed_licenses) or '(none)'}")

    collected = collect_package_infos(args.package_json, args.node_modules, args.exact_versions)

    if args.require_copyright_holder:
        evaluate_copyright_info = has_copyright_holder
    else:
        evaluate_copyright_info = accept_any_copyright

    invalid = find_invalid_package_content(collected.result, allowed_licenses, evaluate_copyright_info)
    missing = find_missing_packages(collected.result, args.exact_versions)

    failed = False
    for line in OutputFormatter.summarize(collected):
        print(line)

    if collected.invalid_packages:
        failed = True
        print("Unreadable manifests:")
        for error in collected.invalid_packages:
            print(f"  {error.package_file_path}")

    if invalid.license:
        failed = True
        print("License not allowed:")
        for package in invalid.license:
            print(f"  {package.full_name}: {package.license or 'UNKNOWN'}")

    if invalid.copyright:
        failed = True
        print("Missing copyright holder:")
        for package in invalid.copyright:
            print(f"  {package.full_name}")

    if missing:
        print("Missing dependencies:")
        for entry in missing:
            print(f"  {entry.package_reference.package.full_name}")
            for label, declared in (
                ("dependencies", entry.missing_dependencies),
                ("devDependencies", entry.missing_dev_dependencies),
                ("optionalDependencies", entry.missing_optional_dependencies),
            ):
                for name, specifier in declared.items():
                    print(f"    {label}: {name}@{specifier}")
        if args.fail_on_missing:
            failed = True

    if failed:
        print("Result: ✗ Check failed")
        return 1

    print("Result: ✓ All packages passed")
    return 0


def handle_stats(args):
    """Handle the 'stats' subcommand."""
    setup_logging(args.verbose, args.loglevel)
    show_stats(args.input, args.scope)
    return 0


def _add_collect_arguments(subparser):
    subparser.add_argument('package_json', help="The product's own package.json (root of the graph)")
    subparser.add_argument('--node-modules', dest='node_modules', action='append', required=True,
                           metavar='DIR',
                           help='Directory searched recursively for package.json files (repeatable)')
    subparser.add_argument('--exact-versions', action='store_true',
                           help='Match declared versions literally, without npm range evaluation')
    subparser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    subparser.add_argument('--loglevel', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                           help='Set log level')


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='depinventory',
        description='Inventory, resolve and prune the npm packages bundled into a product'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Subcommands')

    # Create command
    create_parser = subparsers.add_parser('create', help='Generate an inventory of the used packages')
    _add_collect_arguments(create_parser)
    create_parser.add_argument('output', nargs='?', default='-',
                               help='Output file (default: stdout, use - for stdout)')
    create_parser.add_argument('--format', dest='output_format', default='sbom',
                               choices=['sbom', 'json', 'tree', 'list', 'licenses'],
                               help='Output format (sbom, json, tree, list, licenses). Default: sbom')
    create_parser.set_defaults(func=handle_create)

    # Check command
    check_parser = subparsers.add_parser('check', help='Check licenses and missing dependencies')
    _add_collect_arguments(check_parser)
    check_parser.add_argument('--allow', action='append', metavar='LICENSE',
                              help='Allowed license string (repeatable)')
    check_parser.add_argument('--allow-file', metavar='FILE',
                              help='File listing allowed licenses, one per line')
    check_parser.add_argument('--require-copyright-holder', action='store_true',
                              help='Fail packages whose manifest names no author or contributor')
    check_parser.add_argument('--fail-on-missing', action='store_true',
                              help='Fail when declared dependencies are missing')
    check_parser.set_defaults(func=handle_check)

    # Stats command
    stats_parser = subparsers.add_parser('stats', help='Show statistics of a generated SBOM')
    stats_parser.add_argument('input', help='SBOM file produced by "create"')
    stats_parser.add_argument('--scope', choices=['required', 'optional', 'excluded'],
                              help='Only count components with this scope')
    stats_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose logging')
    stats_parser.add_argument('--loglevel', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    stats_parser.set_defaults(func=handle_stats)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
