"""
NES master palette
Maps the PPU's 6-bit palette indices to RGB for hosts and screenshots
"""

from PIL import Image

# 64 entries, ARGB (0xAARRGGBB)
NES_PALETTE_ARGB = [
    0xFF666666, 0xFF002A88, 0xFF1412A7, 0xFF3B00A4,
    0xFF5C007E, 0xFF6E0040, 0xFF6C0600, 0xFF561D00,
    0xFF333500, 0xFF0B4800, 0xFF005200, 0xFF004F08,
    0xFF00404D, 0xFF000000, 0xFF000000, 0xFF000000,
    0xFFADADAD, 0xFF155FD9, 0xFF4240FF, 0xFF7527FE,
    0xFFA01ACC, 0xFFB71E7B, 0xFFB53120, 0xFF994E00,
    0xFF6B6D00, 0xFF388700, 0xFF0C9300, 0xFF008F32,
    0xFF007C8D, 0xFF000000, 0xFF000000, 0xFF000000,
    0xFFFFFEFF, 0xFF64B0FF, 0xFF9290FF, 0xFFC676FF,
    0xFFF36AFF, 0xFFFE6ECC, 0xFFFE8170, 0xFFEA9E22,
    0xFFBCBE00, 0xFF88D800, 0xFF5CE430, 0xFF45E082,
    0xFF48CDDE, 0xFF4F4F4F, 0xFF000000, 0xFF000000,
    0xFFFFFEFF, 0xFFC0DFFF, 0xFFD3D2FF, 0xFFE8C8FF,
    0xFFFBC2FF, 0xFFFEC4EA, 0xFFFECCC5, 0xFFF7D8A5,
    0xFFE4E594, 0xFFCFEF96, 0xFFBDF4AB, 0xFFB3F3CC,
    0xFFB5EBF2, 0xFFB8B8B8, 0xFF000000, 0xFF000000,
]

# (r, g, b) per palette index
NES_PALETTE = [
    ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)
    for color in NES_PALETTE_ARGB
]

_RGB_BYTES = [bytes(rgb) for rgb in NES_PALETTE]
_RGBA_BYTES = [bytes(rgb) + b"\xff" for rgb in NES_PALETTE]


def frame_to_rgb(frame_buffer):
    """Convert rows of palette indices to packed RGB bytes"""
    return b"".join(_RGB_BYTES[index & 0x3F] for row in frame_buffer for index in row)


def frame_to_rgba(frame_buffer):
    """Packed R, G, B, A bytes; the memory layout of SDL's ABGR8888 on little-endian"""
    return b"".join(_RGBA_BYTES[index & 0x3F] for row in frame_buffer for index in row)


def frame_to_image(frame_buffer, scale=1):
    """Build a Pillow image of the frame, optionally scaled up"""
    height = len(frame_buffer)
    width = len(frame_buffer[0]) if height else 0
    img = Image.frombytes("RGB", (width, height), frame_to_rgb(frame_buffer))
    if scale != 1:
        img = img.resize((width * scale, height * scale), Image.NEAREST)
    return img


def save_screenshot(frame_buffer, filename, scale=1):
    """Save the frame as PNG (or JPEG by extension). Returns the path written."""
    img = frame_to_image(frame_buffer, scale)
    if filename.lower().endswith((".jpg", ".jpeg")):
        img.save(filename, "JPEG", quality=95)
    else:
        if not filename.lower().endswith(".png"):
            filename += ".png"
        img.save(filename, "PNG")
    return filename
