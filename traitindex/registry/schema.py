"""
Typed primitives for the implementors index.

Defines implementor entries, shard payloads, submissions and shards, plus the
normalization that turns the generator's raw entry encodings into entries.
"""
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class SubmissionValidationError(ValueError):
    """Raised when a submission's trait key, package name or entries are malformed."""
    pass


# Kind words rustdoc prefixes to an anchor's title attribute
_TITLE_KINDS = (
    'struct', 'enum', 'union', 'type', 'trait', 'primitive', 'fn',
    'macro', 'constant', 'static', 'foreigntype', 'traitalias',
)

_FOR_RE = re.compile(r'\bfor\s')
_WHERE_RE = re.compile(r'<span|\swhere\b')
_ANCHOR_RE = re.compile(r'<a\s[^>]*>')
_TITLE_ATTR_RE = re.compile(r"""title=(["'])(?P<title>[^"']*)\1""")
_PRIMITIVE_HREF_RE = re.compile(r'primitive\.(?P<name>\w+)\.html')


def derive_backing_types(description: str) -> List[str]:
    """
    Derive backing type identifiers from a rendered impl header.

    Only the implementing type (the first link after ``for`` and before any
    where clause) is considered.

    Args:
        description: Rendered impl header, e.g. ``impl Not for <a title='struct a::B'>B</a>``

    Returns:
        List with the implementing type's path, or empty if none is linked
    """
    for_match = _FOR_RE.search(description)
    if not for_match:
        return []

    segment = description[for_match.end():]
    where_match = _WHERE_RE.search(segment)
    if where_match:
        segment = segment[:where_match.start()]

    anchor = _ANCHOR_RE.search(segment)
    if not anchor:
        return []

    title_match = _TITLE_ATTR_RE.search(anchor.group(0))
    if title_match:
        title = title_match.group('title').strip()
        kind, _, rest = title.partition(' ')
        if rest and kind in _TITLE_KINDS:
            title = rest.strip()
        return [title] if title else []

    primitive = _PRIMITIVE_HREF_RE.search(anchor.group(0))
    if primitive:
        return [primitive.group('name')]

    return []


def _check_name(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value or any(c.isspace() for c in value):
        raise SubmissionValidationError(f"Invalid {what}: {value!r}")
    return value


class ImplementorEntry(BaseModel):
    """One implementation record shown under a package for a trait."""
    model_config = ConfigDict(frozen=True)

    description: str = Field(..., description="Rendered impl header markup")
    synthetic: bool = Field(False, description="True if derived by the tool rather than written")
    backing_types: Tuple[str, ...] = Field(default_factory=tuple, description="Type paths the impl is indexed under")

    @classmethod
    def from_raw(cls, raw: Any) -> 'ImplementorEntry':
        """
        Build an entry from any encoding the generator has emitted.

        Accepts a legacy markup string, a ``{text, synthetic, types}`` object,
        a dict using this model's field names, or an existing entry.

        Raises:
            SubmissionValidationError: If the value cannot be converted
        """
        if isinstance(raw, cls):
            return raw

        if isinstance(raw, str):
            return cls(description=raw, synthetic=False, backing_types=tuple(derive_backing_types(raw)))

        if isinstance(raw, Mapping):
            description = raw.get('text', raw.get('description'))
            synthetic = raw.get('synthetic', False)
            types = raw.get('types', raw.get('backing_types'))

            if not isinstance(description, str):
                raise SubmissionValidationError(f"Implementor entry has no text: {dict(raw)!r}")
            if not isinstance(synthetic, bool):
                raise SubmissionValidationError(f"Implementor entry synthetic flag must be a bool, got {synthetic!r}")
            if types is None:
                types = derive_backing_types(description)
            if not isinstance(types, (list, tuple)) or not all(isinstance(t, str) for t in types):
                raise SubmissionValidationError(f"Implementor entry types must be a list of strings, got {types!r}")

            return cls(description=description, synthetic=synthetic, backing_types=tuple(types))

        raise SubmissionValidationError(
            f"Implementor entry must be a string or mapping, got {type(raw).__name__}"
        )


# package name -> ordered implementor entries (an empty list is meaningful)
ShardPayload = Dict[str, List[ImplementorEntry]]


def normalize_trait_key(trait_key: Any) -> str:
    """Validate a trait key and return it unchanged."""
    return _check_name(trait_key, "trait key")


def normalize_payload(payload: Any) -> ShardPayload:
    """
    Validate a raw payload and convert its entries.

    Args:
        payload: Mapping of package name to a sequence of raw entries

    Returns:
        New payload dict with ``ImplementorEntry`` values, package order preserved

    Raises:
        SubmissionValidationError: If the payload or any package/entry is malformed
    """
    if not isinstance(payload, Mapping):
        raise SubmissionValidationError(
            f"Payload must be a mapping of package name to entries, got {type(payload).__name__}"
        )

    normalized: ShardPayload = {}
    for package, entries in payload.items():
        _check_name(package, "package name")
        if isinstance(entries, (str, bytes)) or not isinstance(entries, (list, tuple)):
            raise SubmissionValidationError(
                f"Entries for package {package!r} must be a list, got {type(entries).__name__}"
            )
        normalized[package] = [ImplementorEntry.from_raw(entry) for entry in entries]

    return normalized


class Submission(BaseModel):
    """A validated (trait key, payload) pair as routed through the gate."""
    trait_key: str
    payload: Dict[str, List[ImplementorEntry]]
    sequence: int = Field(0, description="Order in which the gate received this submission")

    @classmethod
    def build(cls, trait_key: Any, payload: Any, sequence: int = 0) -> 'Submission':
        """Validate and normalize raw submission input."""
        return cls(
            trait_key=normalize_trait_key(trait_key),
            payload=normalize_payload(payload),
            sequence=sequence,
        )


class Shard(BaseModel):
    """One independently loaded index fragment covering a single trait key."""
    trait_key: str
    payload: Dict[str, List[ImplementorEntry]]
    source: Optional[str] = Field(None, description="File the shard was read from")

    def execute(self, submit: Callable[[str, ShardPayload], Any]) -> Any:
        """
        Run the shard: submit its complete payload exactly once.

        Args:
            submit: Submission entry point (usually ``BootstrapGate.submit``)

        Returns:
            Whatever the entry point returns
        """
        return submit(self.trait_key, self.payload)

    @property
    def entry_count(self) -> int:
        return sum(len(entries) for entries in self.payload.values())
