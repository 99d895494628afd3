#!/usr/bin/env python3
"""
traitindexctl - Trait implementors index CLI

Load a generated implementors directory and query which packages implement a trait.
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from traitindex.bootstrap.session import IndexSession, LoadReport
from traitindex.config import IndexConfig, get_config
from traitindex.render import plain_text
from traitindex.shards.loader import LOAD_ORDERS, load_shards


class TraitIndexCLI:
    """Consumer-side CLI over a loaded index session."""

    def __init__(self, config: IndexConfig):
        self.config = config
        self.session = IndexSession()
        self.report: Optional[LoadReport] = None

    def load(self) -> LoadReport:
        """Read the shards directory and run it through the session."""
        shards = load_shards(
            self.config.shards_dir,
            order=self.config.load_order,
            seed=self.config.seed
        )
        self.report = self.session.load(shards, arm_after=self.config.arm_after)
        return self.report

    @property
    def registry(self):
        return self.session.registry

    def summary(self) -> None:
        """Display registry and load statistics."""
        data = self.registry.summary()

        print("Index Summary")
        print("=" * 50)
        print(f"Shards Dir: {self.config.shards_dir}")
        print(f"Traits: {data['traits']}")
        print(f"Packages: {data['packages']}")
        print(f"Implementors: {data['entries']}")
        print(f"Empty Package Slots: {data['empty_package_slots']}")
        print(f"Merges Applied: {data['merges_applied']}")

        if self.report:
            print()
            print("Load:")
            print(f"  Order: {self.config.load_order}")
            print(f"  Shards Executed: {self.report.shards_executed}")
            print(f"  Implementors Submitted: {self.report.entries_submitted}")
            print(f"  Buffered Before Arm: {self.report.buffered}")
            print(f"  Forwarded After Arm: {self.report.forwarded}")
            print(f"  Armed After Shard: {self.report.armed_at}")
            print(f"  Gate Mode: {self.session.gate.mode}")

    def traits(self, prefix: Optional[str] = None) -> None:
        """List trait keys with their package counts."""
        keys = self.registry.trait_keys()
        if prefix:
            keys = [key for key in keys if key.startswith(prefix)]

        if not keys:
            print("No traits found.")
            return

        for key in keys:
            print(f"{key} ({len(self.registry.packages(key))} packages)")

    def query(self, trait_key: str, package: Optional[str] = None, as_json: bool = False) -> int:
        """
        Show implementors of a trait, grouped by package.

        Returns:
            Process exit code (1 if the trait or package is unknown)
        """
        payload = self.registry.query(trait_key)
        if payload is None:
            print(f"Error: trait not found: {trait_key}", file=sys.stderr)
            return 1

        if package is not None:
            if package not in payload:
                print(f"Error: package {package} has no data for {trait_key}", file=sys.stderr)
                return 1
            payload = {package: payload[package]}

        if as_json:
            data = {
                'trait': trait_key,
                'packages': {
                    name: [entry.model_dump() for entry in entries]
                    for name, entries in payload.items()
                }
            }
            print(json.dumps(data, indent=2))
            return 0

        print(f"Implementors of {trait_key}")
        print("=" * 80)

        for name in sorted(payload):
            entries = payload[name]
            print(f"{name}:")
            if not entries:
                print("  (none)")
            for entry in entries:
                marker = " [synthetic]" if entry.synthetic else ""
                print(f"  {plain_text(entry.description)}{marker}")

        return 0


def build_config(args: argparse.Namespace) -> IndexConfig:
    """Resolve file/env configuration, then apply command-line overrides."""
    config = get_config(args.config)

    overrides = {}
    if args.shards_dir is not None:
        overrides['shards_dir'] = args.shards_dir
    if args.arm_after is not None:
        overrides['arm_after'] = args.arm_after
    if args.order is not None:
        overrides['load_order'] = args.order
    if args.seed is not None:
        overrides['seed'] = args.seed
    if args.log_level is not None:
        overrides['log_level'] = args.log_level

    if not overrides:
        return config

    values = {
        'shards_dir': config.shards_dir,
        'arm_after': config.arm_after,
        'load_order': config.load_order,
        'seed': config.seed,
        'log_level': config.log_level,
    }
    values.update(overrides)
    return IndexConfig(**values)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Trait Implementors Index CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--config', type=Path, help='YAML config file (default: ./traitindex.yaml if present)')
    parser.add_argument('--shards-dir', type=Path, help='implementors directory (default: $TRAITINDEX_SHARDS_DIR or ./implementors)')
    parser.add_argument('--arm-after', type=int, help='Shards to load before the registry owner is ready (default: all)')
    parser.add_argument('--order', choices=LOAD_ORDERS, help='Shard load order (default: path)')
    parser.add_argument('--seed', type=int, help='Seed for --order shuffle')
    parser.add_argument('--log-level', help='Logging level (default: WARNING)')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # summary
    subparsers.add_parser('summary', help='Display index statistics')

    # traits
    traits_parser = subparsers.add_parser('traits', help='List indexed traits')
    traits_parser.add_argument('--prefix', help='Only traits whose key starts with this prefix')

    # query
    query_parser = subparsers.add_parser('query', help='Show implementors of a trait')
    query_parser.add_argument('trait_key', help='Trait key (e.g., core::ops::Not)')
    query_parser.add_argument('--package', help='Only this package')
    query_parser.add_argument('--json', action='store_true', help='Output JSON')

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = build_config(args)
        logging.basicConfig(
            level=getattr(logging, config.log_level, logging.WARNING),
            format='%(asctime)s %(levelname)s %(name)s: %(message)s'
        )

        cli = TraitIndexCLI(config)
        cli.load()

        if args.command == 'summary':
            cli.summary()
        elif args.command == 'traits':
            cli.traits(prefix=args.prefix)
        elif args.command == 'query':
            return cli.query(args.trait_key, package=args.package, as_json=args.json)
        else:
            parser.print_help()
            return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
