import sys

DEBUG_MODE = False  # Default to quiet; enable via set_debug(True) when needed
DEBUG_STREAM = None  # None means sys.stdout at print time


def set_debug(value, stream=None):
    """
    Set debug mode on/off

    Args:
        value (bool): True to enable debugging, False to disable
        stream (file, optional): Where debug output goes. Defaults to stdout.
    """
    global DEBUG_MODE, DEBUG_STREAM
    DEBUG_MODE = value
    DEBUG_STREAM = stream


def debug_print(text):
    """
    Prints the given text to the debug stream when debug mode is on.

    Args:
        text (str): The text to print.
    """
    if DEBUG_MODE:
        print(text, file=DEBUG_STREAM or sys.stdout)


def signed_byte(value):
    """Interpret an 8-bit value as two's complement (-128..127)"""
    return value - 0x100 if value & 0x80 else value


def hex_dump(data, start=0, width=16):
    """
    Format bytes as address-prefixed hex rows.

    Args:
        data (bytes): Bytes to dump.
        start (int): Address of the first byte.
        width (int): Bytes per row.

    Returns:
        list[str]: One string per row, e.g. "8000: A9 10 85 00".
    """
    rows = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        rows.append(f"{start + offset:04X}: " + " ".join(f"{b:02X}" for b in chunk))
    return rows
