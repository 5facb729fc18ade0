"""
Runtime configuration for the emulator
Module-level settings shared by the core driver and the host scripts
"""

# Core timing
TIMING = {
    "ppu_cycles_per_cpu_cycle": 3,  # NTSC PPU runs three dots per CPU cycle
    "target_fps": 60,  # Host frame pacing
    "max_steps_per_frame": 100000,  # Safety cap for step_frame()
}

# Program loading
LOADER = {
    "prg_origin": 0x8000,  # Default origin for raw program images
    "pattern_table_size": 0x2000,  # Both pattern tables
}

# Host window
DISPLAY = {
    "title": "scanline-nes",
    "width": 256,
    "height": 240,
    "scale": 3,
    "vsync": True,
    "screenshot_dir": ".",
}

# CPU trace output
TRACE = {
    "enabled": False,  # Emit one trace line per instruction
    "file": None,  # Path for headless trace output; None means debug stream
}


def describe_config():
    """Print the active configuration"""
    print("Configuration:")
    for category, opts in [
        ("Timing", TIMING),
        ("Loader", LOADER),
        ("Display", DISPLAY),
        ("Trace", TRACE),
    ]:
        settings = ", ".join(f"{k}={v}" for k, v in opts.items())
        print(f"  {category}: {settings}")
