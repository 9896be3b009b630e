# <Copyright 2022, Argo AI, LLC. Released under the MIT license.>

"""Emit the results of a release run as step outputs."""

from pathlib import Path
from typing import Dict, List, Optional

import click


def format_outputs(outputs: Dict[str, str]) -> List[str]:
    """Render outputs as `name=value` lines.

    Args:
        outputs: Mapping from output name to value.

    Returns:
        One line per output, in insertion order.

    Raises:
        ValueError: If a value spans multiple lines.
    """
    lines = []
    for name, value in outputs.items():
        if "\n" in value:
            raise ValueError(f"Output {name} must be a single line")
        lines.append(f"{name}={value}")
    return lines


def write_outputs(outputs: Dict[str, str], output_file: Optional[Path] = None) -> None:
    """Append outputs to the step output file, or print them when there is none.

    Args:
        outputs: Mapping from output name to value.
        output_file: File named by `GITHUB_OUTPUT`, if any.
    """
    lines = format_outputs(outputs)
    if output_file is None:
        for line in lines:
            click.echo(line)
        return
    with open(output_file, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")
