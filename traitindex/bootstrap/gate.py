"""
Bootstrap gate between shard submissions and the registry.

Shards and the registry owner may start in either order. Until the owner arms
the gate, submissions are queued; arming replays the queue in submission order
and from then on every submission is forwarded immediately.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Union

from traitindex.registry.schema import ShardPayload, Submission


logger = logging.getLogger(__name__)

Sink = Callable[[str, ShardPayload], Any]


@dataclass
class Buffering:
    """Gate mode before arming: submissions wait in order."""
    pending: Deque[Submission] = field(default_factory=deque)


@dataclass
class Armed:
    """Gate mode after arming: submissions go straight to the sink."""
    sink: Sink


GateState = Union[Buffering, Armed]


class BootstrapGate:
    """
    Single submission entry point for shards.

    Usage:
        gate = BootstrapGate()
        gate.submit("core::ops::Not", {"openssl": [...]})   # queued
        gate.arm(registry.merge_submit)                     # replayed
        gate.submit("core::ops::Not", {"hyper": []})        # forwarded
    """

    def __init__(self):
        self._state: GateState = Buffering()
        self._replaying = False
        self.submitted_count = 0

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def is_armed(self) -> bool:
        return isinstance(self._state, Armed)

    @property
    def mode(self) -> str:
        return "armed" if self.is_armed else "buffering"

    @property
    def pending_count(self) -> int:
        if isinstance(self._state, Buffering):
            return len(self._state.pending)
        return 0

    def submit(self, trait_key: str, payload: Any) -> Submission:
        """
        Submit one shard's complete payload.

        Args:
            trait_key: Fully-qualified trait key
            payload: Mapping of package name to implementor entries

        Returns:
            The validated submission

        Raises:
            SubmissionValidationError: If the key or payload is malformed
                (nothing is queued or forwarded)
        """
        submission = Submission.build(trait_key, payload, sequence=self.submitted_count)
        self.submitted_count += 1

        state = self._state
        if isinstance(state, Armed):
            logger.debug(f"Forwarding submission #{submission.sequence} for {submission.trait_key}")
            state.sink(submission.trait_key, submission.payload)
        else:
            # While a replay is in flight this lands behind everything already queued
            state.pending.append(submission)
            logger.debug(
                f"Buffered submission #{submission.sequence} for {submission.trait_key} "
                f"({len(state.pending)} pending)"
            )

        return submission

    def arm(self, sink: Sink) -> bool:
        """
        Arm the gate and replay queued submissions through ``sink``.

        Calling this when already armed, or from inside the replay, does nothing.
        If ``sink`` raises, the failing submission stays at the head of the
        queue, the gate stays buffering and the exception propagates.

        Args:
            sink: Registry merge function, called as ``sink(trait_key, payload)``

        Returns:
            True if this call armed the gate, False if it was a no-op
        """
        state = self._state
        if isinstance(state, Armed):
            logger.debug("Gate already armed; ignoring arm()")
            return False
        if self._replaying:
            logger.debug("Gate replay in progress; ignoring nested arm()")
            return False

        pending = state.pending
        replayed = 0
        self._replaying = True
        try:
            while pending:
                submission = pending[0]
                sink(submission.trait_key, submission.payload)
                pending.popleft()
                replayed += 1
        finally:
            self._replaying = False

        self._state = Armed(sink=sink)
        logger.info(f"Bootstrap gate armed; replayed {replayed} buffered submission(s)")
        return True
