"""
OptiHub Application Layer - Configuration and the command line interface.
"""

from optihub.app.config import (
    AudioPolicyConfig,
    CacheConfig,
    DuplicateConfig,
    OptiHubConfig,
    OwnershipConfig,
)

__all__ = [
    "OptiHubConfig",
    "CacheConfig",
    "OwnershipConfig",
    "DuplicateConfig",
    "AudioPolicyConfig",
]
