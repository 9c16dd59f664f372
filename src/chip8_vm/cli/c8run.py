"""
c8run - CHIP-8 Program Runner
=============================

Runs a CHIP-8 program image headless through the host loop and prints
the final screen.

Usage Examples
--------------
Run until the step budget is spent:
    $ c8run maze.ch8 --max-steps 5000

Hold keypad keys (host names, default 1234/QWER/ASDF/ZXCV layout):
    $ c8run pong.ch8 --keys Q,V

Slow down like an interactive front end (milliseconds per step):
    $ c8run pong.ch8 --speed 2 --live

Save the final screen as PNG (requires Pillow):
    $ c8run maze.ch8 --png maze.png

Trace every instruction:
    $ c8run maze.ch8 --trace --max-steps 20

Copyright (c) 2026 chip8-vm Contributors
"""

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.cli.errors import handle_cli_exception
from chip8_vm.machine import (
    BoundsPolicy,
    Emulator,
    EmulatorConfig,
    HostLoop,
    StaticInput,
    TextRenderer,
)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool, trace: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if (verbose or trace) else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "rom",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-s", "--speed",
    type=click.FloatRange(min=0),
    default=0.0,
    show_default=True,
    help="Delay after each step in milliseconds",
)
@click.option(
    "-n", "--max-steps",
    type=click.IntRange(min=0),
    default=10_000,
    show_default=True,
    help="Maximum host loop iterations",
)
@click.option(
    "--stack-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Call stack capacity (default: 24, or CHIP8_STACK_DEPTH)",
)
@click.option(
    "--bounds",
    type=click.Choice([p.value for p in BoundsPolicy], case_sensitive=False),
    default=None,
    help="Out-of-bounds access policy (default: fault, clip under python -O)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the random number instruction",
)
@click.option(
    "-k", "--keys",
    type=str,
    default="",
    help="Comma-separated host keys held down for the whole run (e.g. Q,V)",
)
@click.option(
    "--png",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save the final screen as a PNG image",
)
@click.option(
    "--live",
    is_flag=True,
    help="Redraw the screen in the terminal whenever it changes",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Log every executed instruction",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8run")
def main(
    rom: Path,
    speed: float,
    max_steps: int,
    stack_depth: Optional[int],
    bounds: Optional[str],
    seed: Optional[int],
    keys: str,
    png: Optional[Path],
    live: bool,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a CHIP-8 program image.

    ROM is the program image, loaded at $200.

    The run ends after --max-steps iterations, or earlier if the program
    waits for a key while none is held. The final screen is printed.

    \b
    Examples:
        c8run maze.ch8
        c8run pong.ch8 --keys Q --max-steps 50000
        c8run test.ch8 --bounds wrap --seed 1
    """
    setup_logging(verbose, trace)

    try:
        config = EmulatorConfig.from_env()
        overrides = {}
        if stack_depth is not None:
            overrides["stack_depth"] = stack_depth
        if bounds is not None:
            overrides["bounds_policy"] = BoundsPolicy.parse(bounds)
        if seed is not None:
            overrides["seed"] = seed
        if trace:
            overrides["trace"] = True
        config = dataclasses.replace(config, **overrides)
        logger.debug(f"Configuration: {config}")

        emu = Emulator(config)
        emu.load_file(rom)

        held = [name.strip() for name in keys.split(",") if name.strip()]
        for name in held:
            if emu.state.keypad.lookup(name) is None:
                raise click.BadParameter(f"Unknown key '{name}'", param_hint="--keys")
        inputs = StaticInput(emu.state.keypad.pressed_from_names(held))

        if verbose:
            click.echo(f"ROM: {rom} ({len(emu.program)} bytes)", err=True)
            click.echo(f"Bounds policy: {config.bounds_policy.value}", err=True)
            click.echo(f"Stack depth: {config.stack_depth}", err=True)

        renderer = TextRenderer() if live else None
        loop = HostLoop(emu, input_source=inputs, renderer=renderer, step_delay_ms=speed)

        def blocked(machine: Emulator) -> bool:
            return machine.is_waiting_for_key and not any(inputs.states)

        iterations = loop.run(max_iterations=max_steps, should_stop=blocked)

        if not live:
            click.echo(emu.display_text())

        status = "waiting for key" if emu.is_waiting_for_key else "stopped"
        click.echo(
            f"{status} after {iterations} iterations "
            f"({emu.total_steps} instructions), PC=${emu.state.pc:03X}",
            err=True,
        )
        if verbose:
            click.echo(str(emu.snapshot()), err=True)

        if png is not None:
            image = emu.state.display.render_image()
            if image is None:
                click.echo("Error: --png requires Pillow (pip install chip8-vm[image])", err=True)
                sys.exit(1)
            png.write_bytes(image)
            if verbose:
                click.echo(f"Screen written to: {png}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Runtime")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
