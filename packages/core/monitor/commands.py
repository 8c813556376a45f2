"""
Async subprocess helper shared by the environment probes.

Every failure mode (missing binary, non-zero exit, timeout, OS error) is
raised as ProbeUnavailable so probes have one exception to convert into
their fail-safe default.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from typing import Sequence

from .errors import ProbeUnavailable

log = logging.getLogger(__name__)


async def run_command(
    args: Sequence[str],
    timeout: float = 10.0,
    allow_nonzero: bool = False,
) -> str:
    """
    Run a command and return its decoded stdout.

    The child is killed if the timeout elapses or the awaiting task is
    cancelled, so a cancelled tick never leaves stray processes behind.
    """
    command = " ".join(args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        raise ProbeUnavailable(command, "executable not found")
    except OSError as e:
        raise ProbeUnavailable(command, f"OS error: {e}")

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        _kill(proc)
        raise ProbeUnavailable(command, f"timed out after {timeout:.1f}s")
    except asyncio.CancelledError:
        _kill(proc)
        raise

    if proc.returncode != 0 and not allow_nonzero:
        raise ProbeUnavailable(command, f"exit code {proc.returncode}")

    output = stdout.decode("utf-8", errors="replace")
    log.debug("%s -> %d bytes", command, len(output))
    return output


def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
