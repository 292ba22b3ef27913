"""
Entry point and auto-restart wrapper.
"""

import argparse
import sys
import time

from .constants import AGENT_VERSION
from .config import log, safe_print, load_settings, server_url, api_timeout
from .errors import NoPontoError, ParseError
from . import http_client
from .api import TimeCardClient
from .notifier import LoggingSink
from .session import SessionManager
from .vault import CredentialVault


def _parse_args(argv):
    parser = argparse.ArgumentParser(prog="noponto", description="NoPonto work-day monitor")
    parser.add_argument(
        "--headless", nargs=3, metavar=("START1", "END1", "START2"),
        help="monitor a session without a window; alerts go to the log",
    )
    parser.add_argument(
        "--fetch", action="store_true",
        help="print today's clock records from the time-card service and exit",
    )
    return parser.parse_args(argv)


def run_headless(manager, start1, end1, start2):
    """Run one session to completion with LoggingSink. Returns exit code."""
    try:
        manager.start_session(start1, end1, start2)
    except ParseError as e:
        safe_print(str(e))
        return 2
    status = manager.get_status()
    safe_print(f"Monitoring started — expected end {status.end_time}")
    monitor = manager.monitor
    try:
        while monitor.is_alive():
            monitor.join(timeout=1.0)
    except KeyboardInterrupt:
        manager.stop_session()
        safe_print("\nMonitoring stopped by user.")
    return 0


def main(argv=None):
    """Primary entry point."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    safe_print("NoPonto v" + AGENT_VERSION)

    settings = load_settings()
    vault = CredentialVault()
    client = TimeCardClient(base_url=server_url(settings), timeout=api_timeout(settings))

    if args.fetch:
        try:
            times = client.fetch_today_records_from_vault(vault)
        except NoPontoError as e:
            log.error("Fetch failed: %s", e)
            safe_print(f"Fetch failed: {e}")
            return 1
        safe_print("\n".join(times) if times else "No clock records for today.")
        return 0

    if args.headless:
        manager = SessionManager(sink=LoggingSink(), settings=settings)
        return run_headless(manager, *args.headless)

    # Tk is only needed for the windowed mode.
    from .app import NoPontoApp
    NoPontoApp(vault, client, settings=settings).run()
    return 0


def run_with_auto_restart():
    """
    Wrapper that restarts the windowed app on crash.
    Crash counter resets if the app ran for 2+ minutes (not a boot-loop).
    """
    crash_count = 0
    crash_window = 120
    max_rapid_crashes = 10

    while True:
        start_time = time.time()
        try:
            return main()
        except KeyboardInterrupt:
            safe_print("\nStopped by user.")
            return 0
        except SystemExit as e:
            if e.code in (0, None):
                return 0
            log.error("SystemExit: %s", e)
            raise
        except Exception as e:
            elapsed = time.time() - start_time
            log.error("Crashed after %.0fs: %s", elapsed, e, exc_info=True)

            if elapsed > crash_window:
                crash_count = 0
            crash_count += 1

            if crash_count >= max_rapid_crashes:
                log.error("Too many rapid crashes (%d). Giving up.", crash_count)
                raise
            wait = min(10 * crash_count, 60)

            log.info("Restarting in %ds (crash %d)...", wait, crash_count)
            time.sleep(wait)

            http_client.http = http_client.reset_session(http_client.http)
