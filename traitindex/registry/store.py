"""
In-memory implementors registry.

Holds the merged mapping of trait key to per-package implementor lists and
answers consumer queries. Populated only through the bootstrap gate.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from traitindex.registry.schema import (
    ImplementorEntry,
    ShardPayload,
    normalize_payload,
    normalize_trait_key,
)


logger = logging.getLogger(__name__)

Listener = Callable[[str, ShardPayload], Any]


class ImplementorRegistry:
    """
    Process-wide store of implementor data keyed by trait.

    Re-submitting a trait merges by package: packages named in the new payload
    are replaced, all other packages already known for the trait are kept.
    """

    def __init__(self):
        self._traits: Dict[str, ShardPayload] = {}
        self._revisions: Dict[str, int] = {}
        self._listeners: List[Listener] = []
        self.merges_applied = 0

    def merge_submit(self, trait_key: str, payload: Any) -> None:
        """
        Merge a shard payload into the registry.

        Args:
            trait_key: Fully-qualified trait key
            payload: Mapping of package name to implementor entries

        Raises:
            SubmissionValidationError: If the key or payload is malformed
                (the registry is left unchanged)
        """
        trait_key = normalize_trait_key(trait_key)
        incoming = normalize_payload(payload)

        merged = dict(self._traits.get(trait_key, {}))
        for package, entries in incoming.items():
            merged[package] = list(entries)

        # Single assignment so queries never observe a half-merged key
        self._traits[trait_key] = merged
        self._revisions[trait_key] = self._revisions.get(trait_key, 0) + 1
        self.merges_applied += 1

        logger.debug(
            f"Merged {trait_key}: {len(incoming)} package(s) submitted, "
            f"{len(merged)} known (revision {self._revisions[trait_key]})"
        )

        self._notify(trait_key)

    def query(self, trait_key: str) -> Optional[ShardPayload]:
        """
        Get the merged payload for a trait.

        Returns:
            Snapshot copy of package -> entries, or None if never submitted
        """
        current = self._traits.get(trait_key)
        if current is None:
            return None
        return {package: list(entries) for package, entries in current.items()}

    def query_package(self, trait_key: str, package: str) -> Optional[List[ImplementorEntry]]:
        """
        Get one package's entries for a trait.

        Returns:
            List of entries (possibly empty), or None if the trait or package is unknown
        """
        current = self._traits.get(trait_key)
        if current is None or package not in current:
            return None
        return list(current[package])

    def packages(self, trait_key: str) -> List[str]:
        """Return package names known for a trait, in first-seen order."""
        return list(self._traits.get(trait_key, {}).keys())

    def trait_keys(self) -> List[str]:
        """Return all known trait keys, sorted."""
        return sorted(self._traits.keys())

    def revision(self, trait_key: str) -> int:
        """Return the number of merges applied to a trait (0 if unknown)."""
        return self._revisions.get(trait_key, 0)

    def subscribe(self, listener: Listener) -> None:
        """
        Register a consumer callback invoked after every merge.

        The listener receives ``(trait_key, snapshot)``.
        """
        self._listeners.append(listener)

    def _notify(self, trait_key: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(trait_key, self.query(trait_key))
            except Exception as e:
                logger.warning(f"Registry listener failed for {trait_key}: {e}")

    def summary(self) -> Dict[str, int]:
        """Return counts describing the registry contents."""
        packages = set()
        entries = 0
        empty_slots = 0
        for payload in self._traits.values():
            for package, package_entries in payload.items():
                packages.add(package)
                entries += len(package_entries)
                if not package_entries:
                    empty_slots += 1

        return {
            'traits': len(self._traits),
            'packages': len(packages),
            'entries': entries,
            'empty_package_slots': empty_slots,
            'merges_applied': self.merges_applied,
        }

    def snapshot(self) -> Dict[str, ShardPayload]:
        """Return a copy of the full registry."""
        return {key: self.query(key) for key in self._traits}

    def __contains__(self, trait_key: str) -> bool:
        return trait_key in self._traits

    def __len__(self) -> int:
        return len(self._traits)
