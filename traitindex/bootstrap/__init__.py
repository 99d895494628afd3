"""
Bootstrap module for assembling shards into the registry.

The gate buffers shard submissions until the registry owner is ready, then
replays them in order; the session is the creation point for both.
"""
