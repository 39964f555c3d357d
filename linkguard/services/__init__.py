"""
LinkGuard Services Package

Business logic modules:
- providers: Reputation backend adapters and retry helper
- cache: Verdict caching
- aggregation: Concurrent fan-out and consensus
- checker: LinkChecker facade
"""

# Services are imported explicitly when needed to avoid circular imports
# Example: from linkguard.services.checker import LinkChecker

__all__ = [
    'providers',
    'cache',
    'aggregation',
    'checker',
]
