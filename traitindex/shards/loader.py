"""
Shard discovery for a generated ``implementors`` directory.
"""
import logging
import random
from pathlib import Path
from typing import List, Optional

from traitindex.registry.schema import Shard
from traitindex.shards.parser import SHARD_FILE_RE, parse_shard_file


logger = logging.getLogger(__name__)

LOAD_ORDERS = ('path', 'reverse', 'shuffle')


def discover_shard_files(root: Path) -> List[Path]:
    """
    Find every shard file below an implementors directory.

    Args:
        root: The ``implementors`` directory

    Returns:
        Shard file paths sorted by relative POSIX path

    Raises:
        FileNotFoundError: If root does not exist
        NotADirectoryError: If root is not a directory
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"Shards directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Shards path is not a directory: {root}")

    files = [
        path for path in root.rglob('trait.*.js')
        if path.is_file() and SHARD_FILE_RE.match(path.name)
    ]
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def order_shards(shards: List[Shard], order: str = 'path', seed: Optional[int] = None) -> List[Shard]:
    """
    Arrange shards in a simulated load order.

    Args:
        shards: Shards in discovery order
        order: 'path' (discovery order), 'reverse', or 'shuffle'
        seed: Seed for 'shuffle'

    Raises:
        ValueError: If order is unknown
    """
    if order == 'path':
        return list(shards)
    if order == 'reverse':
        return list(reversed(shards))
    if order == 'shuffle':
        shuffled = list(shards)
        random.Random(seed).shuffle(shuffled)
        return shuffled
    raise ValueError(f"Unknown load order: {order} (expected one of {', '.join(LOAD_ORDERS)})")


def load_shards(root: Path, order: str = 'path', seed: Optional[int] = None) -> List[Shard]:
    """
    Parse every shard file below root.

    Args:
        root: The ``implementors`` directory
        order: Load order passed to ``order_shards``
        seed: Seed for 'shuffle'

    Returns:
        Shards in the requested order
    """
    root = Path(root)
    shards: List[Shard] = []
    files = discover_shard_files(root)
    for path in files:
        shards.extend(parse_shard_file(path, root))

    logger.info(f"Read {len(shards)} shard(s) from {len(files)} file(s) under {root}")
    return order_shards(shards, order=order, seed=seed)
