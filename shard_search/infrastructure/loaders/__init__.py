from .shard_parser import ShardParser, SUPPORTED_SCHEMA_VERSIONS
from .shard_loader import ShardLoader

__all__ = ["ShardParser", "ShardLoader", "SUPPORTED_SCHEMA_VERSIONS"]
