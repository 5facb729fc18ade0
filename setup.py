from setuptools import setup

setup(
    name="scanline-nes",
    version="0.1.0",
    description="NES emulator core: 6502 CPU, dot-stepped PPU background renderer and system bus",
    python_requires=">=3.8",
    py_modules=[
        "config",
        "cpu",
        "headless_run",
        "main",
        "memory",
        "nes",
        "palette",
        "ppu",
        "utils",
    ],
    install_requires=[
        "pysdl2",
        "Pillow",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "scanline-nes=main:main",
            "scanline-nes-headless=headless_run:main",
        ],
    },
)
