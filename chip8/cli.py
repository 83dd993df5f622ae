"""Command line entry point: load a ROM file and run it in a pyglet window."""

import argparse
import logging
import random
from pathlib import Path

from .constants import CPU_HZ, SCALE
from .cpu import Chip8
from .errors import Chip8Error

logger = logging.getLogger(__name__)


def load_rom(path):
    """Read a raw ROM image; no header or metadata is expected."""
    logger.info("Loading ROM: %s", path)
    return Path(path).read_bytes()


def build_parser():
    parser = argparse.ArgumentParser(prog="chip8", description="CHIP-8 emulator")
    parser.add_argument("rom", help="path to the ROM image")
    parser.add_argument("--scale", type=int, default=SCALE, help="window pixels per CHIP-8 pixel (default: %(default)s)")
    parser.add_argument("--hz", type=int, default=CPU_HZ, help="instructions per second, timers tick once per instruction (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=None, help="seed for the random opcode")
    parser.add_argument("--debug", action="store_true", help="log every executed instruction")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    if args.scale < 1 or args.hz < 1:
        logger.error("--scale and --hz must be positive")
        return 2

    try:
        engine = Chip8(load_rom(args.rom), rng=random.Random(args.seed))
    except OSError as e:
        logger.error("Cannot read ROM: %s", e)
        return 1
    except Chip8Error as e:
        logger.error("Cannot load ROM: %s", e)
        return 1

    # pyglet needs a display, so it is only imported once there is something to show
    import pyglet
    from .window import Chip8Window

    window = Chip8Window(engine, scale=args.scale, hz=args.hz, caption=f"CHIP-8 Emulator - {Path(args.rom).name}")
    pyglet.app.run()
    return 1 if window.error is not None else 0
