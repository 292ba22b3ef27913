"""
OverlaySink — Tkinter NotificationSink.

notify() and surface_window() are called from the monitor thread. They
only enqueue; the queue is drained on the Tk main thread via root.after(),
where the overlay Toplevel is created. Hardened against widget-destroyed
crashes with TclError guards.
"""

import queue
import tkinter as tk

from .constants import (
    THEME, OVERLAY_AUTO_CLOSE_MS, OVERLAY_WIDTH, OVERLAY_HEIGHT, SINK_DRAIN_MS,
)
from .config import log
from .notifier import NotificationSink, KIND_WARNING


class OverlaySink(NotificationSink):
    """
    Lifecycle (drain and overlay on main thread):
      notify()         → queue ("notify", notification)
      surface_window() → queue ("surface", None)
      _drain()         → every 200ms, shows overlay / raises main window
    """

    def __init__(self, root):
        self._root = root
        self._queue = queue.Queue()
        self._overlay = None
        self._root.after(SINK_DRAIN_MS, self._drain)

    def notify(self, notification):
        self._queue.put(("notify", notification))

    def surface_window(self):
        self._queue.put(("surface", None))

    def _drain(self):
        try:
            while True:
                try:
                    kind, item = self._queue.get_nowait()
                except queue.Empty:
                    break
                if kind == "notify":
                    self._show_overlay(item)
                else:
                    self._raise_main()
        except Exception as e:
            log.error("Overlay drain error: %s", e, exc_info=True)
        self._root.after(SINK_DRAIN_MS, self._drain)

    def _raise_main(self):
        try:
            self._root.deiconify()
            self._root.lift()
            self._root.focus_force()
        except tk.TclError as e:
            log.warning("Could not raise main window: %s", e)

    def close_overlay(self, top=None):
        """Close the overlay (only if it is still ``top`` when given)."""
        if self._overlay is None or (top is not None and top is not self._overlay):
            return
        try:
            self._overlay.destroy()
        except tk.TclError:
            pass
        self._overlay = None

    def _show_overlay(self, notification):
        # Only one overlay at a time; the newest replaces the old one.
        self.close_overlay()

        bg = THEME["warning"] if notification.kind == KIND_WARNING else THEME["success"]
        try:
            top = tk.Toplevel(self._root)
            self._overlay = top
            top.overrideredirect(True)
            top.attributes("-topmost", True)
            top.configure(bg=bg)

            W, H = OVERLAY_WIDTH, OVERLAY_HEIGHT
            x = (top.winfo_screenwidth() - W) // 2
            y = (top.winfo_screenheight() - H) // 2
            top.geometry(f"{W}x{H}+{x}+{y}")

            body = tk.Frame(top, bg=bg, padx=24, pady=24)
            body.pack(fill="both", expand=True)
            tk.Label(
                body, text=notification.title, font=("Segoe UI", 18, "bold"),
                fg="white", bg=bg,
            ).pack(pady=(0, 10))
            tk.Label(
                body, text=notification.message, font=("Segoe UI", 12),
                fg="white", bg=bg, wraplength=W - 60, justify="center",
            ).pack(pady=(0, 14))
            tk.Button(
                body, text="Fechar", font=("Segoe UI", 10, "bold"),
                bg=THEME["success_dark"], fg="white", relief="flat",
                padx=18, pady=6, cursor="hand2", command=self.close_overlay,
            ).pack()

            top.after(OVERLAY_AUTO_CLOSE_MS, lambda t=top: self.close_overlay(t))
            log.info("Overlay shown: %s", notification.title)
        except tk.TclError as e:
            log.error("Failed to show overlay: %s", e)
            self._overlay = None
