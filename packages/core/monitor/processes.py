from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

import psutil


@dataclass(frozen=True)
class ProcessInfo:
    name: str
    cmdline: str


def running_processes() -> List[ProcessInfo]:
    """Snapshot of the process table; processes we cannot read are skipped."""
    procs: List[ProcessInfo] = []
    for p in psutil.process_iter(attrs=["name", "cmdline"]):
        try:
            name = p.info.get("name") or ""
            cmdline = p.info.get("cmdline") or []
            procs.append(ProcessInfo(name=str(name), cmdline=" ".join(str(c) for c in cmdline)))
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return procs


def find_process(procs: Iterable[ProcessInfo], name: str) -> bool:
    """Exact process-name match, or the name appearing in a command line."""
    procs = list(procs)
    if any(p.name == name for p in procs):
        return True
    return any(name in p.cmdline for p in procs)


def find_any(procs: Iterable[ProcessInfo], signatures: Tuple[str, ...]) -> bool:
    for p in procs:
        for sig in signatures:
            if sig in p.name or sig in p.cmdline:
                return True
    return False
