"""
NoPonto — Work-Day Monitor
==========================
Tracks today's 8-hour quota split across two work periods and alerts when
the day is almost done and when it is complete. Optionally imports today's
clock records from the PontoMais time-card service using credentials kept
encrypted on disk.

Usage:
    python noponto.py                          # windowed
    python noponto.py --headless 08:00 12:00 13:00
    python noponto.py --fetch
"""

import sys

from noponto_core.runner import run_with_auto_restart


if __name__ == "__main__":
    sys.exit(run_with_auto_restart())
