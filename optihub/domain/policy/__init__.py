"""
Policy - Import-settings checks and fixes for audio, textures, meshes and fonts.
"""

from optihub.domain.policy.audio import (
    find_wrong_compression,
    fix_audio_compression,
    is_wrong_compression,
    optimal_settings,
)
from optihub.domain.policy.mesh_font import group_meshes_by_compression, split_fonts_by_compression
from optihub.domain.policy.texture import (
    disable_mipmaps,
    find_compressed_not_crunched,
    find_not_in_atlas,
    find_uncompressed,
    find_with_mipmaps,
    fix_texture_compression,
)

__all__ = [
    # Audio
    "optimal_settings",
    "is_wrong_compression",
    "find_wrong_compression",
    "fix_audio_compression",
    # Textures
    "find_uncompressed",
    "find_compressed_not_crunched",
    "find_with_mipmaps",
    "find_not_in_atlas",
    "fix_texture_compression",
    "disable_mipmaps",
    # Meshes and fonts
    "group_meshes_by_compression",
    "split_fonts_by_compression",
]
