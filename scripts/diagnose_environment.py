"""
Diagnostic script for the environment probes.
Runs each probe once, prints the raw evidence it classified, and the
overall verdict the integrity monitor would reach.

With `--session SECONDS` it instead runs a headless proctored session
for that long, logging every window command the monitor would issue.

Exit code 0 when the environment is clean (or the session was not
terminated), 1 otherwise.
"""

import sys
import os
import asyncio
import logging
import time

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from packages.core.monitor.evaluator import evaluate
from packages.core.monitor.inspector import EnvironmentInspector
from packages.core.monitor.session_monitor import IntegritySessionMonitor
from packages.core.monitor.shell import LoggingShell
from packages.core.monitor.types import IntegrityMonitorConfig
from packages.shared.store import ConfigStore

logging.basicConfig(
    level=logging.DEBUG if "--verbose" in sys.argv else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)


def print_section(title):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


async def run_probes(inspector):
    timings = {}
    results = {}
    for name in ("display", "conference", "radio", "peripheral"):
        probe = getattr(inspector, name)
        start = time.perf_counter()
        results[name] = await probe.check()
        timings[name] = time.perf_counter() - start
    return results, timings


def run_headless_session(config, seconds):
    print_section(f"Headless session ({seconds:.0f}s)")
    monitor = IntegritySessionMonitor(config, LoggingShell())
    monitor.start()
    monitor.request_start()
    try:
        time.sleep(seconds)
    except KeyboardInterrupt:
        print("\nSession interrupted by user")
    if not monitor.get_state().terminated:
        monitor.request_end()
        time.sleep(0.5)
    state = monitor.get_state()
    monitor.stop()
    print(f"Final phase: {state.phase.value}, warnings issued: {state.warnings_issued}")
    return 1 if state.terminated else 0


def main():
    config = ConfigStore().load().to_monitor_config()
    if "--session" in sys.argv:
        idx = sys.argv.index("--session")
        seconds = float(sys.argv[idx + 1]) if idx + 1 < len(sys.argv) else 30.0
        return run_headless_session(config, seconds)

    cfg = IntegrityMonitorConfig.from_dict(config)
    inspector = EnvironmentInspector.from_config(cfg)

    print_section("Individual probes (sequential, for timing)")
    results, timings = asyncio.run(run_probes(inspector))
    for name, result in results.items():
        print(f"{name:<11} {timings[name] * 1000:7.0f} ms  {result}")
        if result.evidence:
            print(f"{'':<21}evidence: {result.evidence}")

    print_section("Combined inspection (concurrent)")
    start = time.perf_counter()
    snapshot = asyncio.run(inspector.inspect())
    elapsed = time.perf_counter() - start
    evaluation = evaluate(snapshot)
    print(f"Inspection took {elapsed * 1000:.0f} ms")

    if evaluation.clean:
        print("✓ Environment satisfies every session requirement")
        return 0

    for violation in evaluation.violations:
        print(f"✗ {violation.kind.value}: {violation.message}")
    print(f"\nWarning prompt would show: {evaluation.headline}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
