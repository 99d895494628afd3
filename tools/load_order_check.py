#!/usr/bin/env python3
"""
Load Order Gate - Verifies buffering never changes what the registry ends up with

Loads a generated implementors directory many times, each time with shards in
a shuffled order and the registry owner becoming ready at a random point, and
checks that every run ends with the same registry as merging the same shards
directly in that same order.

Usage:
    python3 tools/load_order_check.py path/to/implementors [--rounds 20] [--seed 0]

Exit codes:
    0 - Every gated load matched its direct merge
    1 - One or more gated loads diverged
"""
import argparse
import random
import sys
from pathlib import Path
from typing import List

from traitindex.bootstrap.session import IndexSession
from traitindex.registry.schema import Shard
from traitindex.registry.store import ImplementorRegistry
from traitindex.shards.loader import load_shards, order_shards


class LoadOrderChecker:
    """Checks buffering equivalence and arm idempotency on real shard data."""

    def __init__(self, shards: List[Shard], seed: int = 0):
        self.shards = shards
        self.rng = random.Random(seed)
        self.failures: List[str] = []

    def fail(self, message: str):
        """Record a validation failure."""
        self.failures.append(message)
        print(f"FAIL: {message}")

    def direct_state(self, shards: List[Shard]) -> dict:
        """Registry state from merging shards directly, no gate."""
        registry = ImplementorRegistry()
        for shard in shards:
            registry.merge_submit(shard.trait_key, shard.payload)
        return registry.snapshot()

    def check_ordering(self, round_number: int):
        """A shuffled gated load must match a direct merge in the same order."""
        shards = order_shards(self.shards, order='shuffle', seed=self.rng.randrange(2 ** 32))
        arm_after = self.rng.randint(0, len(shards))

        session = IndexSession()
        session.load(shards, arm_after=arm_after)

        if session.registry.snapshot() != self.direct_state(shards):
            self.fail(f"Round {round_number}: gated load (arm after {arm_after}) diverged from direct merge")

    def check_arm_idempotent(self):
        """A second arm must not replay anything."""
        session = IndexSession()
        for shard in self.shards:
            session.run_shard(shard)
        session.arm()
        before = session.registry.snapshot()
        merges = session.registry.merges_applied

        if session.arm():
            self.fail("Second arm() reported a transition")
        if session.registry.merges_applied != merges or session.registry.snapshot() != before:
            self.fail("Second arm() changed the registry")

    def run_all_checks(self, rounds: int) -> bool:
        """Run all checks and return overall result."""
        print("Load Order Gate")
        print("=" * 60)
        print(f"Shards: {len(self.shards)}, orderings: {rounds}")

        for round_number in range(rounds):
            self.check_ordering(round_number)
        self.check_arm_idempotent()

        print("\n" + "=" * 60)

        if self.failures:
            print(f"\n❌ FAILED: {len(self.failures)} load order check(s) failed")
            print("\nFailures:")
            for i, failure in enumerate(self.failures, 1):
                print(f"  {i}. {failure}")
            return False
        else:
            print("\n✅ SUCCESS: Gated load matches direct merge in every ordering")
            return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Verify gated loads match direct merges")
    parser.add_argument("shards_dir", type=Path, help="implementors directory")
    parser.add_argument("--rounds", type=int, default=20, help="Shuffled orderings to try (default: 20)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    args = parser.parse_args()

    checker = LoadOrderChecker(load_shards(args.shards_dir), seed=args.seed)
    success = checker.run_all_checks(args.rounds)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
