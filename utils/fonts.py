"""Font lookup for label previews (Windows + Linux + macOS)."""

import os
import sys
from functools import lru_cache
from typing import Dict, List, Optional

from PIL import ImageFont

# Preferred sans-serif faces, regular and bold file names
_CANDIDATES = {
    False: ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "arial.ttf",
            "Helvetica.ttc", "NotoSans-Regular.ttf"),
    True: ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf",
           "Helvetica.ttc", "NotoSans-Bold.ttf"),
}


def _font_dirs() -> List[str]:
    dirs = []
    # Project-bundled fonts (fonts/ directory next to this file's parent)
    project_fonts = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "fonts")
    dirs.append(project_fonts)
    if sys.platform == "win32":
        dirs.append(os.path.join(os.environ.get("WINDIR", r"C:\Windows"), "Fonts"))
    elif sys.platform == "darwin":
        dirs.extend(["/System/Library/Fonts", "/Library/Fonts", os.path.expanduser("~/Library/Fonts")])
    else:
        dirs.extend(["/usr/share/fonts", "/usr/local/share/fonts",
                     os.path.expanduser("~/.local/share/fonts"), os.path.expanduser("~/.fonts")])
    return [d for d in dirs if os.path.isdir(d)]


@lru_cache(maxsize=1)
def _font_files() -> Dict[str, str]:
    """File name -> full path for every font file under the font directories."""
    files: Dict[str, str] = {}
    for font_dir in _font_dirs():
        for root, _, names in os.walk(font_dir):
            for name in names:
                if name.lower().endswith((".ttf", ".otf", ".ttc")):
                    files.setdefault(name, os.path.join(root, name))
    return files


def find_font_path(bold: bool = False) -> Optional[str]:
    files = _font_files()
    for name in _CANDIDATES[bool(bold)]:
        if name in files:
            return files[name]
    return None


@lru_cache(maxsize=64)
def load_font(size_px: int, bold: bool = False) -> ImageFont.ImageFont:
    """Load a sans-serif font at a pixel size, falling back to Pillow's built-in font."""
    size_px = max(int(size_px), 1)
    path = find_font_path(bold)
    if path:
        try:
            return ImageFont.truetype(path, size_px)
        except OSError:
            pass
    return ImageFont.load_default(size=size_px)
