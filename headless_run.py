#!/usr/bin/env python3
import argparse
import sys
import time

from config import TRACE, describe_config
from nes import NES
from palette import save_screenshot
from utils import debug_print, hex_dump, set_debug


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Headless NES run without SDL.")
    parser.add_argument("rom", help="Path to ROM file")
    parser.add_argument("--frames", type=int, default=1, help="Number of frames to run")
    parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Run this many CPU instructions instead of whole frames",
    )
    parser.add_argument("--pc", type=lambda s: int(s, 16), default=None, help="Override start PC (hex)")
    parser.add_argument("--trace", default=TRACE["file"], help="Write one CPU trace line per instruction to this file")
    parser.add_argument("--screenshot", default=None, help="Save the final frame as PNG")
    parser.add_argument("--log", default=None, help="Path to write debug output (implies --debug)")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--dump-zero-page", action="store_true", help="Print RAM 0x0000-0x00FF when done")
    return parser.parse_args(argv)


def run_steps(nes, steps, trace_fp=None):
    """Run a fixed number of instructions. Returns how many were unknown."""
    unknown = 0
    for _ in range(steps):
        if trace_fp is not None:
            trace_fp.write(nes.cpu.trace_line() + "\n")
        if not nes.step().ok:
            unknown += 1
    return unknown


def run_frames(nes, frames, trace_fp=None):
    """Run whole frames, tracing every instruction when a trace file is open"""
    for _ in range(frames):
        if trace_fp is None:
            nes.step_frame()
            continue
        nes.ppu.frame_complete = False
        while not nes.ppu.frame_complete:
            trace_fp.write(nes.cpu.trace_line() + "\n")
            nes.step()


def main(argv=None):
    args = parse_args(argv)

    log_fp = None
    if args.log:
        log_fp = open(args.log, "w", buffering=1)
    set_debug(args.debug or log_fp is not None, stream=log_fp)
    try:
        return run_headless(args)
    finally:
        if log_fp:
            set_debug(False)
            log_fp.close()


def run_headless(args):
    """Load the ROM, run it and report. Returns the process exit code."""
    if args.debug:
        describe_config()

    nes = NES()
    if not nes.load_rom(args.rom):
        print(f"Failed to load ROM: {args.rom}")
        return 1

    if args.pc is not None:
        nes.cpu.PC = args.pc
        debug_print(f"Headless: start PC overridden to 0x{args.pc:04X}")

    trace_fp = open(args.trace, "w") if args.trace else None
    start = time.time()
    try:
        if args.steps is not None:
            unknown = run_steps(nes, args.steps, trace_fp)
            summary = f"steps={args.steps}, unknown_opcodes={unknown}"
        else:
            run_frames(nes, args.frames, trace_fp)
            summary = f"frames={nes.ppu.frame}, unknown_opcodes={nes.unknown_opcodes}"
    except KeyboardInterrupt:
        print("\nHeadless run stopped by user")
        return 0
    finally:
        if trace_fp:
            trace_fp.close()
    elapsed = time.time() - start

    if args.screenshot:
        written = save_screenshot(nes.get_frame_buffer(), args.screenshot)
        print(f"Screenshot saved as: {written}")

    if args.dump_zero_page:
        zero_page = bytes(nes.memory.peek(addr) for addr in range(0x100))
        for row in hex_dump(zero_page):
            print(row)

    sys.stdout.write(
        f"Headless run complete: {summary}, cpu_cycles={nes.cpu_cycles}, elapsed={elapsed:.3f}s\n"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
