"""
Reading generated shard files.

- parser: JavaScript shard text -> Shard objects
- loader: directory discovery and simulated load order
"""
