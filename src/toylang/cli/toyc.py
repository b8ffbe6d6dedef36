"""
toyc - toylang Compiler Command-Line Interface
==============================================

Compiles a toylang source file and writes the LLVM IR of the resulting
module to standard output.

Usage Examples
--------------
    $ toyc program.toy
    $ toyc program.toy > program.ll

Behavior
--------
- Statement errors are reported on standard error; the statement is
  skipped and compilation continues.
- The module dump is written to standard output exactly once, at the
  end of the run, whatever the number of failed statements.

Exit Codes
----------
| Code | Meaning                                    |
|------|--------------------------------------------|
| 0    | Input compiled (statement errors allowed)  |
| 1    | Input file missing or unreadable           |
| 3    | Internal error                             |
"""

import logging
import sys
from pathlib import Path

import click

from toylang.cli.errors import ExitCode
from toylang.frontend import Compiler


@click.command()
@click.argument(
    "input_file",
    type=click.Path(path_type=Path),
)
def main(input_file: Path) -> None:
    """
    Compile a toylang program to LLVM IR.

    INPUT_FILE is the source file to compile.

    \b
    Example:
        toyc program.toy > program.ll
    """
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    try:
        result = Compiler().compile_file(input_file)
    except OSError as e:
        click.echo(f"Could not open file: {e}", err=True)
        sys.exit(ExitCode.FILE_ERROR)
    except Exception as e:
        click.echo(f"Internal error: {e}", err=True)
        sys.exit(ExitCode.INTERNAL_ERROR)

    for error in result.errors:
        click.echo(str(error), err=True)

    click.echo(result.ir, nl=False)


if __name__ == "__main__":
    main()
