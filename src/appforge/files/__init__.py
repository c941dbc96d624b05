from .codec import decode_files, encode_files, normalize_files
from .languages import detect_language, format_file_size
from .paths import normalize_path
from .tree import build_tree, iter_nodes
from .workspace import Workspace

__all__ = [
    "Workspace",
    "build_tree",
    "decode_files",
    "detect_language",
    "encode_files",
    "format_file_size",
    "iter_nodes",
    "normalize_files",
    "normalize_path",
]
