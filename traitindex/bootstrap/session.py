"""
Index session: the explicit creation point for one gate and one registry.

Shard execution code gets the session's gate; the registry owner arms it once
its own initialization is done.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from traitindex.bootstrap.gate import BootstrapGate
from traitindex.registry.schema import Shard
from traitindex.registry.store import ImplementorRegistry


logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """Outcome of loading a sequence of shards."""
    shards_executed: int = 0
    buffered: int = 0
    forwarded: int = 0
    entries_submitted: int = 0
    armed_at: Optional[int] = None


class IndexSession:
    """Owns the bootstrap gate and the registry for one page lifetime."""

    def __init__(self, gate: Optional[BootstrapGate] = None, registry: Optional[ImplementorRegistry] = None):
        self.gate = gate or BootstrapGate()
        self.registry = registry or ImplementorRegistry()

    def run_shard(self, shard: Shard) -> None:
        """Execute one shard against the gate."""
        shard.execute(self.gate.submit)

    def arm(self) -> bool:
        """Signal that the registry owner is ready. Idempotent."""
        return self.gate.arm(self.registry.merge_submit)

    def load(self, shards: Iterable[Shard], arm_after: Optional[int] = None) -> LoadReport:
        """
        Execute shards in order, arming the gate at a chosen point.

        Args:
            shards: Shards in load order
            arm_after: Number of shards to execute before arming
                (0 arms first, None arms after the last shard)

        Returns:
            LoadReport describing how submissions were routed

        Raises:
            ValueError: If arm_after is negative
        """
        if arm_after is not None and arm_after < 0:
            raise ValueError(f"arm_after must be >= 0, got {arm_after}")

        report = LoadReport()

        for index, shard in enumerate(shards):
            if arm_after is not None and index == arm_after:
                self._arm_for_report(report)

            armed = self.gate.is_armed
            self.run_shard(shard)
            report.shards_executed += 1
            report.entries_submitted += shard.entry_count
            if armed:
                report.forwarded += 1
            else:
                report.buffered += 1

        # Fewer shards than arm_after, or arm_after is None: owner becomes ready last
        self._arm_for_report(report)

        logger.info(
            f"Loaded {report.shards_executed} shard(s): "
            f"{report.buffered} buffered, {report.forwarded} forwarded"
        )
        return report

    def _arm_for_report(self, report: LoadReport) -> None:
        if self.arm():
            report.armed_at = report.shards_executed
