"""
c8disasm - CHIP-8 Disassembler Command-Line Interface
=====================================================

Usage Examples
--------------
Disassemble a program image (loaded at $200):
    $ c8disasm pong.ch8

With a different base address:
    $ c8disasm overlay.bin --address 0x300

Limit number of instructions:
    $ c8disasm pong.ch8 --count 20

Output to file:
    $ c8disasm pong.ch8 -o pong.lst

Copyright (c) 2026 chip8-vm Contributors
"""

import sys
from pathlib import Path
from typing import Optional

import click

from chip8_vm import __version__
from chip8_vm.disassembler import Chip8Disassembler
from chip8_vm.machine import Memory


def parse_address(text: str) -> int:
    """Parse 0x-prefixed hex, $-prefixed hex or decimal."""
    if text.lower().startswith("0x"):
        return int(text, 16)
    if text.startswith("$"):
        return int(text[1:], 16)
    return int(text)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default="0x200",
    help="Base address for disassembly (hex with 0x or $ prefix, or decimal). Default: 0x200",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit raw bytes from output (show only mnemonic and operand)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c8disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    address: str,
    count: Optional[int],
    no_bytes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble a CHIP-8 program image.

    INPUT_FILE is the binary program image to disassemble.

    Words that are not instructions are listed as DW.

    Examples:

        # Disassemble first 20 instructions
        c8disasm pong.ch8 --count 20 -o pong.lst
    """
    try:
        base_address = parse_address(address)
    except ValueError:
        click.echo(f"Error: Invalid address '{address}'", err=True)
        sys.exit(1)

    if not 0 <= base_address < Memory.SIZE:
        click.echo(f"Error: Address must be 0-4095 (0x000-0xFFF)", err=True)
        sys.exit(1)

    try:
        data = input_file.read_bytes()
    except IOError as e:
        click.echo(f"Error reading {input_file}: {e}", err=True)
        sys.exit(1)

    if len(data) == 0:
        click.echo(f"Error: {input_file} is empty", err=True)
        sys.exit(1)

    if verbose:
        click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
        click.echo(f"Base address: ${base_address:03X}", err=True)

    output_lines = [
        f"; Disassembly of {input_file.name}",
        f"; Size: {len(data)} bytes",
        f"; Base address: ${base_address:03X}",
        "",
    ]

    instructions = Chip8Disassembler().disassemble(data, start_address=base_address, count=count)
    for instr in instructions:
        if no_bytes:
            line = f"${instr.address:03X}: {instr.text}"
            if instr.comment:
                line += f"  ; {instr.comment}"
            output_lines.append(line)
        else:
            output_lines.append(str(instr))

    result = "\n".join(output_lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        except IOError as e:
            click.echo(f"Error writing {output}: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(result, nl=False)

    if verbose:
        click.echo(f"Instructions disassembled: {len(instructions)}", err=True)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
