"""Run ``ioreg`` and hand its output to the registry dump parser.

The whole output is buffered before parsing starts, so a failing command
never yields a partial snapshot.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess

from pycello._constants import IOREG_BATTERY_CLASS, IOREG_COMMAND

_logger = logging.getLogger(__name__)


def ioreg_args(command: str = IOREG_COMMAND, battery_class: str = IOREG_BATTERY_CLASS) -> list[str]:
    return [command, "-c", battery_class, "-w0"]


def read_ioreg_lines(command: str = IOREG_COMMAND, battery_class: str = IOREG_BATTERY_CLASS) -> list[str]:
    """Run ``ioreg`` and return its output lines.

    Raises :class:`subprocess.CalledProcessError` on a non-zero exit and
    :class:`OSError` when the command cannot be started.
    """
    args = ioreg_args(command, battery_class)
    _logger.debug("Running %s", args)
    result = subprocess.run(args, check=True, capture_output=True, text=True)
    return result.stdout.splitlines()


async def read_ioreg_stream(
    command: str = IOREG_COMMAND,
    battery_class: str = IOREG_BATTERY_CLASS,
) -> asyncio.StreamReader:
    """Run ``ioreg`` without blocking and return a reader over its output.

    The reader already holds the complete output and is at EOF once
    drained.
    """
    args = ioreg_args(command, battery_class)
    _logger.debug("Running %s", args)
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    if process.returncode:
        raise subprocess.CalledProcessError(process.returncode, args, output=stdout, stderr=stderr)

    reader = asyncio.StreamReader()
    reader.feed_data(stdout)
    reader.feed_eof()
    return reader
