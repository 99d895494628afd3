"""
Unit tests for the index session load-order driver.
"""
import pytest

from traitindex.bootstrap.gate import BootstrapGate
from traitindex.bootstrap.session import IndexSession
from traitindex.registry.schema import ImplementorEntry, Shard
from traitindex.registry.store import ImplementorRegistry


def make_shard(trait_key: str, **packages) -> Shard:
    payload = {
        name: [ImplementorEntry(description=text) for text in texts]
        for name, texts in packages.items()
    }
    return Shard(trait_key=trait_key, payload=payload)


SHARDS = [
    make_shard('K1', A=['e1']),
    make_shard('K1', B=['e2']),
    make_shard('K2', A=[]),
    make_shard('K1', A=['e3']),
]


class TestIndexSession:
    """Test session wiring and arm placement."""

    def test_session_creates_gate_and_registry(self):
        """A session owns one gate and one registry."""
        session = IndexSession()

        assert isinstance(session.gate, BootstrapGate)
        assert isinstance(session.registry, ImplementorRegistry)
        assert not session.gate.is_armed

    def test_injected_collaborators_used(self):
        """An explicit gate/registry handle is honored."""
        gate = BootstrapGate()
        registry = ImplementorRegistry()
        session = IndexSession(gate=gate, registry=registry)

        session.run_shard(SHARDS[0])
        session.arm()

        assert registry.query('K1') is not None
        assert gate.is_armed

    @pytest.mark.parametrize("arm_after", [None, 0, 1, 2, 3, 4, 10])
    def test_arm_position_does_not_change_result(self, arm_after):
        """Every arm position ends in the same registry as direct merging."""
        direct = ImplementorRegistry()
        for shard in SHARDS:
            direct.merge_submit(shard.trait_key, shard.payload)

        session = IndexSession()
        session.load(SHARDS, arm_after=arm_after)

        assert session.registry.snapshot() == direct.snapshot()
        assert session.gate.is_armed

    def test_report_counts_routing(self):
        """The report splits buffered and forwarded submissions."""
        session = IndexSession()
        report = session.load(SHARDS, arm_after=1)

        assert report.shards_executed == 4
        assert report.buffered == 1
        assert report.forwarded == 3
        assert report.armed_at == 1

    def test_report_counts_submitted_entries(self):
        """Overwritten entries still count as submitted."""
        report = IndexSession().load(SHARDS)

        assert report.entries_submitted == 3

    def test_arm_after_none_buffers_everything(self):
        """With no arm point the owner becomes ready after the last shard."""
        session = IndexSession()
        report = session.load(SHARDS)

        assert report.buffered == 4
        assert report.forwarded == 0
        assert report.armed_at == 4

    def test_arm_after_beyond_shard_count(self):
        """An arm point past the end arms after the last shard."""
        session = IndexSession()
        report = session.load(SHARDS[:2], arm_after=5)

        assert report.armed_at == 2
        assert session.gate.is_armed

    def test_negative_arm_after_rejected(self):
        """Negative arm points are invalid."""
        with pytest.raises(ValueError):
            IndexSession().load(SHARDS, arm_after=-1)

    def test_arm_is_idempotent(self):
        """Arming the session twice does not duplicate merges."""
        session = IndexSession()
        session.run_shard(SHARDS[0])

        assert session.arm() is True
        assert session.arm() is False
        assert session.registry.merges_applied == 1

    def test_end_to_end_scenario(self):
        """Two shards buffered for K1, arm, then a post-arm shard for K1."""
        session = IndexSession()
        session.run_shard(SHARDS[0])
        session.run_shard(SHARDS[1])
        session.arm()

        e1, e2, e3 = (ImplementorEntry(description=t) for t in ('e1', 'e2', 'e3'))
        assert session.registry.query('K1') == {'A': [e1], 'B': [e2]}

        session.run_shard(SHARDS[3])
        assert session.registry.query('K1') == {'A': [e3], 'B': [e2]}
