"""
NES Emulator with SDL2 Graphics
Main entry point for the emulator
"""

import argparse
import os
import sys
import time

import sdl2

from config import DISPLAY, TIMING, describe_config
from nes import NES
from palette import frame_to_rgba, save_screenshot
from utils import set_debug


class EmulatorWindow:
    def __init__(self, scale=None):
        self.nes = NES()
        self.running = False

        # Display settings
        self.scale = scale or DISPLAY["scale"]
        self.window_width = DISPLAY["width"] * self.scale
        self.window_height = DISPLAY["height"] * self.scale

        # SDL components
        self.window = None
        self.renderer = None
        self.texture = None

        # Timing
        self.target_fps = TIMING["target_fps"]
        self.frame_time = 1.0 / self.target_fps
        self.screenshot_count = 0

    def initialize_sdl(self):
        """Initialize SDL2"""
        if sdl2.SDL_Init(sdl2.SDL_INIT_VIDEO | sdl2.SDL_INIT_EVENTS) != 0:
            print(f"SDL2 initialization failed: {sdl2.SDL_GetError()}")
            return False

        # Create window
        self.window = sdl2.SDL_CreateWindow(
            DISPLAY["title"].encode(),
            sdl2.SDL_WINDOWPOS_CENTERED,
            sdl2.SDL_WINDOWPOS_CENTERED,
            self.window_width,
            self.window_height,
            sdl2.SDL_WINDOW_SHOWN,
        )

        if not self.window:
            print(f"Window creation failed: {sdl2.SDL_GetError()}")
            return False

        # Create renderer
        flags = sdl2.SDL_RENDERER_ACCELERATED
        if DISPLAY["vsync"]:
            flags |= sdl2.SDL_RENDERER_PRESENTVSYNC
        self.renderer = sdl2.SDL_CreateRenderer(self.window, -1, flags)

        if not self.renderer:
            print(f"Renderer creation failed: {sdl2.SDL_GetError()}")
            return False

        # Create texture for the NES frame
        self.texture = sdl2.SDL_CreateTexture(
            self.renderer,
            sdl2.SDL_PIXELFORMAT_ABGR8888,
            sdl2.SDL_TEXTUREACCESS_STREAMING,
            DISPLAY["width"],
            DISPLAY["height"],
        )

        if not self.texture:
            print(f"Texture creation failed: {sdl2.SDL_GetError()}")
            return False

        return True

    def take_screenshot(self, filename=None):
        """Save the current frame as PNG at window scale"""
        if filename is None:
            self.screenshot_count += 1
            filename = os.path.join(
                DISPLAY["screenshot_dir"], f"screenshot_{self.screenshot_count:03d}.png"
            )
        try:
            written = save_screenshot(self.nes.get_frame_buffer(), filename, self.scale)
        except OSError as e:
            print(f"Error taking screenshot: {e}")
            return False
        print(f"Screenshot saved as: {written}")
        return True

    def cleanup_sdl(self):
        """Clean up SDL resources"""
        if self.texture:
            sdl2.SDL_DestroyTexture(self.texture)
        if self.renderer:
            sdl2.SDL_DestroyRenderer(self.renderer)
        if self.window:
            sdl2.SDL_DestroyWindow(self.window)
        sdl2.SDL_Quit()

    def handle_events(self):
        """Handle SDL events"""
        event = sdl2.SDL_Event()
        while sdl2.SDL_PollEvent(event):
            if event.type == sdl2.SDL_QUIT:
                self.running = False
            elif event.type == sdl2.SDL_KEYDOWN:
                self.handle_keydown(event.key.keysym.sym)

    def handle_keydown(self, key):
        if key == sdl2.SDLK_ESCAPE:
            self.running = False
        elif key == sdl2.SDLK_r or key == sdl2.SDLK_F5:
            self.nes.reset()
        elif key == sdl2.SDLK_F12:
            self.take_screenshot()

    def update_texture(self):
        """Update SDL texture with NES frame data"""
        pixels = frame_to_rgba(self.nes.get_frame_buffer())
        sdl2.SDL_UpdateTexture(self.texture, None, pixels, DISPLAY["width"] * 4)

    def render(self):
        """Render the current frame"""
        sdl2.SDL_SetRenderDrawColor(self.renderer, 0, 0, 0, 255)
        sdl2.SDL_RenderClear(self.renderer)
        sdl2.SDL_RenderCopy(self.renderer, self.texture, None, None)
        sdl2.SDL_RenderPresent(self.renderer)

    def run(self, rom_path, start_pc=None):
        """Run the emulator"""
        if not self.initialize_sdl():
            return False

        if not self.nes.load_rom(rom_path):
            print(f"Failed to load ROM: {rom_path}")
            self.cleanup_sdl()
            return False

        if start_pc is not None:
            self.nes.cpu.PC = start_pc
        self.running = True

        print("Starting emulator...")
        print("Controls:")
        print("  R: Reset")
        print("  F12: Take screenshot")
        print("  Escape: Quit")

        frame_count = 0
        start_time = time.time()

        while self.running:
            frame_start = time.time()

            self.handle_events()
            self.nes.step_frame()
            self.update_texture()
            self.render()

            frame_count += 1
            if frame_count % 120 == 0:
                elapsed = time.time() - start_time
                fps = frame_count / elapsed if elapsed > 0 else 0
                print(f"FPS: {fps:.1f}")

            frame_duration = time.time() - frame_start
            if frame_duration < self.frame_time:
                sleep_time = self.frame_time - frame_duration
                if sleep_time > 0.001:
                    time.sleep(sleep_time)

        self.cleanup_sdl()
        return True


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run an NES ROM in an SDL2 window")
    parser.add_argument("rom", help="Path to an iNES (.nes) file")
    parser.add_argument("--scale", type=int, default=DISPLAY["scale"], help="Window scale factor")
    parser.add_argument("--pc", type=lambda s: int(s, 16), help="Override start PC (hex)")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    if not os.path.exists(args.rom):
        print(f"ROM file not found: {args.rom}")
        return 1

    set_debug(args.debug)
    if args.debug:
        describe_config()

    emulator = EmulatorWindow(scale=args.scale)

    try:
        success = emulator.run(args.rom, start_pc=args.pc)
        return 0 if success else 1
    except KeyboardInterrupt:
        print("\nEmulator stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
