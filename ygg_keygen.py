#!/usr/bin/env python3
"""
Yggdrasil Ed25519 Key Generator
Searches for Ed25519 keys whose Yggdrasil address is as "high" as possible
(most leading zero bits in the public key) or, with --ipv6-nice, whose address
contains the longest run of all-zero groups.

Requirements:
    pip install PyNaCl tqdm psutil

KEY INSIGHT: every leading zero bit of the public key moves the address one
step further into 0200::/7, and Yggdrasil prefers nodes with higher addresses.
Each extra bit halves the odds, so the search runs one worker thread per CPU and
keeps only the best key seen so far.

Usage:
    python ygg_keygen.py                     # Run until Ctrl+C
    python ygg_keygen.py --timeout 600       # Run for 10 minutes
    python ygg_keygen.py --timeout 2:30      # Run for 2 hours 30 minutes
    python ygg_keygen.py --target-zeros 32   # Stop at the first key with 32 leading zero bits
    python ygg_keygen.py --ipv6-nice         # Rank keys by zero groups in the address
    python ygg_keygen.py --threads 4 -v      # 4 workers, verbose output
    python ygg_keygen.py --json              # Save the best key as JSON
    python ygg_keygen.py --check-key <hex>   # Verify a private key and show its address
    python ygg_keygen.py --check-key ygg_000005a1.json  # Verify a saved key file
"""

import argparse
import logging
import os
import signal
import sys
import threading
from typing import Optional

from genkeys import Coordinator, SearchSnapshot, Settings, SettingsError, keypair_from_secret
from genkeys.errors import GenkeysError
from genkeys.reporting import ProgressBar, format_best, format_system_status, print_best
from genkeys.scoring import Candidate
from genkeys.settings import MAX_TARGET_ZEROS, hardware_workers
from helpers import load_config, load_keys_json, save_keys_json

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 1.0  # seconds between progress bar refreshes


class ArgumentParser:
    """Handles command line argument parsing."""

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Yggdrasil Ed25519 Key Generator",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=ArgumentParser._get_examples()
        )

        ArgumentParser._add_arguments(parser)
        return parser

    @staticmethod
    def _add_arguments(parser: argparse.ArgumentParser):
        """Add command line arguments."""
        parser.add_argument('-t', '--threads', type=int,
                            help='Number of worker threads (default: 0 - one per logical CPU)')
        parser.add_argument('-T', '--timeout', type=ArgumentParser._parse_timeout,
                            help='Maximum execution time in seconds, or H:MM (default: 0 - no limit)')
        parser.add_argument('-z', '--target-zeros', type=int,
                            help='Stop once the best key has this many leading zero bits (default: 0 - no target)')
        parser.add_argument('--ipv6-nice', action='store_true', default=None,
                            help='Search for zero blocks in the IPv6 address')
        parser.add_argument('-v', '--verbose', action='store_true', default=None,
                            help='Enable verbose output with additional statistics')
        parser.add_argument('--config', type=str, default='config.ini',
                            help='Path to config file with a [genkeys] section (default: config.ini)')
        parser.add_argument('--no-progress', action='store_true',
                            help='Disable the progress bar')

        # Output options
        parser.add_argument('--json', action='store_true',
                            help='Save the best key in JSON format when the search ends')
        parser.add_argument('--output-dir', type=str,
                            help='Directory for --json output (default: current directory)')

        # Key check
        parser.add_argument('--check-key', type=str, metavar='HEX|FILE',
                            help='Verify a 64-byte private key, a 32-byte seed or a saved ygg_*.json file and print its address')

    @staticmethod
    def _parse_timeout(timeout_str: str) -> int:
        """Parse timeout argument.

        Examples:
            --timeout 90    -> 90 seconds
            --timeout 2:30  -> 2 hours 30 minutes
        """
        try:
            if ':' in timeout_str:
                hours, minutes = timeout_str.split(':')
                return int(hours) * 3600 + int(minutes) * 60
            return int(timeout_str)
        except ValueError:
            raise argparse.ArgumentTypeError("Invalid timeout format")

    @staticmethod
    def _get_examples() -> str:
        return """
Examples:
  python ygg_keygen.py --timeout 600       # Search for 10 minutes
  python ygg_keygen.py --timeout 2:30      # Search for 2 hours 30 minutes
  python ygg_keygen.py --target-zeros 32   # Stop at 32 leading zero bits
  python ygg_keygen.py --ipv6-nice         # Prefer addresses with zero groups
  python ygg_keygen.py --threads 4 -v      # 4 worker threads, verbose
  python ygg_keygen.py --json --output-dir keys  # Save best key to keys/ygg_<id>.json
  python ygg_keygen.py --check-key <hex>   # Show address for an existing key
  python ygg_keygen.py --check-key keys/ygg_000005a1.json  # Verify a saved key file

Config file ([genkeys] section of config.ini, overridden by flags):
  threads, timeout, verbose, ipv6_nice, target_zeros, output_dir
        """


class YggKeyGenerator:
    """Runs a key search with progress display and signal handling."""

    def __init__(self, settings: Settings, show_progress: bool = True):
        self.settings = settings
        self.show_progress = show_progress and not settings.verbose
        self.coordinator = Coordinator(settings, on_best=self._on_best)
        self.progress_bar: Optional[ProgressBar] = None
        self._stop_progress_monitor = threading.Event()

    def generate(self) -> SearchSnapshot:
        """Run the search until a stop condition fires."""
        self._print_generation_info()
        previous_handlers = self._install_signal_handlers()

        if self.show_progress:
            self.progress_bar = ProgressBar(time_limit=self.settings.max_duration)
        progress_thread = threading.Thread(target=self._progress_monitor, daemon=True)
        progress_thread.start()

        try:
            return self.coordinator.start()
        finally:
            self._stop_progress_monitor.set()
            progress_thread.join(PROGRESS_INTERVAL)
            if self.progress_bar:
                self.progress_bar.close()
            for signum, handler in previous_handlers.items():
                if handler is not None:
                    signal.signal(signum, handler)

    def _print_generation_info(self):
        print(f"Threads: {self.settings.worker_count}")
        if self.settings.max_duration:
            print(f"Max runtime: {self.settings.max_duration}s")
        if self.settings.target_leading_zeros:
            print(f"Target: {self.settings.target_leading_zeros} leading zero bits")
        print(f"Ranking: {'address zero blocks' if self.settings.ipv6_nice else 'leading zero bits'}")
        print("-" * 60)

    def _install_signal_handlers(self):
        """Route Ctrl+C and SIGTERM to a graceful stop; return the previous handlers."""
        def signal_handler(signum, frame):
            self.coordinator.request_stop()

        previous = {}
        for signum in (signal.SIGINT, getattr(signal, "SIGTERM", None)):
            if signum is not None:
                previous[signum] = signal.signal(signum, signal_handler)
        return previous

    def _on_best(self, snapshot: SearchSnapshot):
        write = self.progress_bar.write if self.progress_bar else print
        print_best(snapshot, self.settings.verbose, write)

    def _progress_monitor(self):
        """Refresh the progress bar (or log progress in verbose mode) until stopped."""
        ticks = 0
        while not self._stop_progress_monitor.wait(PROGRESS_INTERVAL):
            ticks += 1
            snapshot = self.coordinator.snapshot()
            if self.progress_bar:
                self.progress_bar.update(snapshot)
            elif self.settings.verbose and ticks % 10 == 0:
                logger.debug(f"{snapshot.generated:,} keys | {snapshot.rate:,.0f} keys/sec | {snapshot.elapsed:.1f}s")


def create_settings_from_args(args, config) -> Settings:
    """Create Settings from the config file with command line overrides."""
    settings = Settings.from_config(config)
    return settings.with_overrides(
        workers=args.threads,
        max_duration=args.timeout,
        verbose=args.verbose,
        ipv6_nice=args.ipv6_nice,
        target_leading_zeros=args.target_zeros,
    )


def check_key(key: str) -> int:
    """Print the public key and address for a private key or a saved key file; return exit status."""
    if os.path.isfile(key):
        candidate = load_keys_json(key)
        if candidate is None:
            print(f"Error: {key} does not hold a valid key")
            return 1
    else:
        try:
            candidate = Candidate.from_keys(keypair_from_secret(key))
        except (ValueError, GenkeysError) as e:
            print(f"Error: {e}")
            return 1

    keys = candidate.keys
    print(f"Priv: {keys.secret_hex}")
    print(f"Pub: {keys.public_hex}")
    print(f"IP: {candidate.address_str}")
    print(f"Leading zero bits: {candidate.zero_bits}")
    print(f"Zero blocks: {candidate.zero_blocks}")
    return 0


def validate_args(args) -> Optional[str]:
    """Return an error message for invalid arguments, or None."""
    if args.threads is not None and args.threads < 0:
        return "--threads must be 0 or more."
    if args.timeout is not None and args.timeout < 0:
        return "--timeout must be 0 or more."
    if args.target_zeros is not None and not 0 <= args.target_zeros <= MAX_TARGET_ZEROS:
        return f"--target-zeros must be between 0 and {MAX_TARGET_ZEROS}."
    return None


def setup_logging(verbose: bool):
    """Log to stderr; DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)


def main(argv=None) -> int:
    """Main entry point."""
    parser = ArgumentParser.create_parser()
    args = parser.parse_args(argv)
    setup_logging(bool(args.verbose))

    if args.check_key:
        return check_key(args.check_key)

    error = validate_args(args)
    if error:
        print(f"Error: {error}")
        return 1

    config = load_config(args.config)
    try:
        settings = create_settings_from_args(args, config)
    except SettingsError as e:
        print(f"Error: {e}")
        return 1

    if settings.verbose:
        setup_logging(verbose=True)
        print(format_system_status())
        if settings.worker_count > hardware_workers():
            print(f"Warning: {settings.worker_count} threads on {hardware_workers()} logical CPUs")

    generator = YggKeyGenerator(settings, show_progress=not args.no_progress)
    snapshot = generator.generate()

    print("=" * 60)
    print(format_best(snapshot, verbose=True))
    print("=" * 60)

    if snapshot.best is None:
        print("No key was generated before the search stopped.")
        return 1

    if args.json:
        output_dir = args.output_dir or config.get("genkeys", "output_dir", fallback=None)
        json_file = save_keys_json(snapshot.best, output_dir)
        print(f"\nKey saved to JSON file:\n  {json_file}")

    print("\nKeep your private key secure and never share it!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
