"""
BlockQL

Resolves block selection queries (single block, offset, contiguous range,
explicit list, endpoint range) into ordered, size-bounded block fetches.

Core imports are lazily loaded so that importing a submodule does not pull
in the HTTP stack:

    from blockql.service import BlockQueryService
    from blockql.source import JSONRPCBlockSource
    from blockql.exceptions import ValidationError
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    if name == 'BlockQueryService':
        from .service import BlockQueryService
        return BlockQueryService
    elif name == 'JSONRPCBlockSource':
        from .source import JSONRPCBlockSource
        return JSONRPCBlockSource
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'blockql' has no attribute {name!r}")

__all__ = ['BlockQueryService', 'JSONRPCBlockSource', 'load_config']
