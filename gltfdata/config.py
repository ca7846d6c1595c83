# gltfdata/config.py

from dataclasses import dataclass


@dataclass
class LoaderConfig:
    """Configuration for loading glTF assets"""
    debug: bool = False
    byte_order: str = '<'
    check_structure: bool = True
    load_images: bool = True
    load_shaders: bool = True
    chunk_size: int = 8192

    def __post_init__(self):
        if self.byte_order not in ('<', '>', '='):
            raise ValueError(f"Invalid byte order: {self.byte_order}")
        if self.chunk_size <= 0:
            raise ValueError(f"Invalid chunk size: {self.chunk_size}")
