"""
Human-readable output for a running search: best key printouts, a tqdm
progress bar and a psutil system summary.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import psutil
from tqdm import tqdm

from .coordinator import SearchSnapshot

logger = logging.getLogger(__name__)

NS_PER_US = 1_000
NS_PER_MS = 1_000_000
NS_PER_SEC = 1_000_000_000
NS_PER_MIN = 60 * NS_PER_SEC
NS_PER_HOUR = 60 * NS_PER_MIN


def _fraction(value: int, digits: int) -> str:
    frac = f"{value:0{digits}d}".rstrip("0")
    return f".{frac}" if frac else ""


def format_duration(seconds: float) -> str:
    """Format a duration the way Go prints time.Duration (e.g. 1.5ms, 2m3.5s, 1h0m0s)."""
    total_ns = int(round(seconds * NS_PER_SEC))
    if total_ns == 0:
        return "0s"

    sign = "-" if total_ns < 0 else ""
    ns = abs(total_ns)

    if ns < NS_PER_US:
        return f"{sign}{ns}ns"
    if ns < NS_PER_MS:
        return f"{sign}{ns // NS_PER_US}{_fraction(ns % NS_PER_US, 3)}µs"
    if ns < NS_PER_SEC:
        return f"{sign}{ns // NS_PER_MS}{_fraction((ns % NS_PER_MS) // NS_PER_US, 3)}ms"
    if ns < NS_PER_MIN:
        return f"{sign}{ns // NS_PER_SEC}{_fraction(ns % NS_PER_SEC, 9)}s"

    parts = ""
    if ns >= NS_PER_HOUR:
        parts += f"{ns // NS_PER_HOUR}h"
        ns %= NS_PER_HOUR
    parts += f"{ns // NS_PER_MIN}m"
    ns %= NS_PER_MIN
    parts += f"{ns // NS_PER_SEC}{_fraction(ns % NS_PER_SEC, 9)}s"
    return sign + parts


def format_best(snapshot: SearchSnapshot, verbose: bool = False) -> str:
    """Render the current best key as the lines printed on every improvement."""
    lines = []
    elapsed = int(snapshot.elapsed)
    if elapsed > 0:
        lines.append(f"----- {format_duration(snapshot.elapsed)} --- {snapshot.generated} keys tried")
        if verbose:
            lines.append(f"----- generation speed {snapshot.generated // elapsed} keys per second")

    best = snapshot.best
    if best is None:
        lines.append("No key found yet")
        return "\n".join(lines)

    lines.append(f"Priv: {best.keys.secret_hex}")
    lines.append(f"Pub: {best.keys.public_hex}")
    lines.append(f"IP: {best.address_str}")
    if verbose:
        lines.append(f"Zero bits: {best.zero_bits} | Zero blocks: {best.zero_blocks}")
    return "\n".join(lines)


def print_best(snapshot: SearchSnapshot, verbose: bool = False, write: Callable[[str], None] = print):
    write(format_best(snapshot, verbose))


class ProgressBar:
    """Progress bar using tqdm for non-verbose mode."""

    def __init__(self, time_limit: int = 0, disable: bool = False):
        self.time_limit = time_limit
        self.start_time = time.time()

        if time_limit:
            # Time-based progress bar
            self.tqdm_bar = tqdm(
                total=time_limit,
                unit='s',
                unit_scale=False,
                desc='Searching keys',
                disable=disable,
                bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]{postfix}'
            )
        else:
            # No time limit, use indeterminate progress
            self.tqdm_bar = tqdm(
                unit='keys',
                unit_scale=True,
                desc='Searching keys',
                disable=disable,
                bar_format='{desc}: {n_fmt} [{elapsed}, {rate_fmt}]{postfix}'
            )

    def update(self, snapshot: SearchSnapshot):
        """Update the bar from a search snapshot."""
        if self.time_limit:
            self.tqdm_bar.n = min(int(snapshot.elapsed), self.time_limit)
            self.tqdm_bar.set_postfix_str(f'{format_count(snapshot.generated)} keys, {snapshot.rate:,.0f}/s',
                                          refresh=False)
        else:
            self.tqdm_bar.n = snapshot.generated

        if snapshot.best is not None:
            self.tqdm_bar.set_description_str(f'Searching keys (best {snapshot.best.zero_bits} bits)',
                                              refresh=False)
        self.tqdm_bar.refresh()

    def write(self, message: str):
        """Write a message without interfering with the progress bar."""
        self.tqdm_bar.write(message)

    def close(self):
        self.tqdm_bar.close()


def format_count(count: int) -> str:
    """Format a key count with k/M/B suffixes."""
    if count >= 1_000_000_000:
        return f'{count / 1_000_000_000:.2f}B'
    if count >= 1_000_000:
        return f'{count / 1_000_000:.2f}M'
    if count >= 1_000:
        return f'{count / 1_000:.0f}k'
    return f'{count:,}'


def get_system_resources() -> Dict[str, Any]:
    """Get current system resource usage."""
    try:
        memory = psutil.virtual_memory()
        return {
            'cpu_count': psutil.cpu_count(logical=True),
            'cpu_physical': psutil.cpu_count(logical=False),
            'cpu_percent': psutil.cpu_percent(interval=0.1),
            'memory_percent': memory.percent,
            'memory_available': memory.available,
        }
    except psutil.Error as e:
        logger.warning(f"Could not get system resources: {e}")
        return {}


def format_system_status(resources: Optional[Dict[str, Any]] = None) -> str:
    """Summarize system resources for the startup banner."""
    resources = get_system_resources() if resources is None else resources
    if not resources:
        return "System resources unavailable"
    return "\n".join([
        "=" * 60,
        "SYSTEM RESOURCE STATUS",
        "=" * 60,
        f"CPU Cores:     {resources.get('cpu_count') or '?'} logical / {resources.get('cpu_physical') or '?'} physical",
        f"CPU Usage:     {resources.get('cpu_percent', 0):.1f}%",
        f"Memory Usage:  {resources.get('memory_percent', 0):.1f}% "
        f"({resources.get('memory_available', 0) / 1024 / 1024 / 1024:.1f}GB available)",
        "=" * 60,
    ])
