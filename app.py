"""
File Extension Recovery — GUI Application.

Small Tkinter window: pick a folder, press "Recover Extensions", and every
file whose content is recognised gets the matching extension appended.
"""

APP_VERSION = "1.0"

import os
import logging
import tkinter as tk
from tkinter import ttk, filedialog, messagebox

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

from extrecover.manager import ExtensionRecovery, RecoveryProgress, RecoverySession

logger = logging.getLogger(__name__)


# ─── Theme ────────────────────────────────────────────────────

BG_DARK     = "#1e1e2e"
BG_INPUT    = "#33334d"
FG_TEXT     = "#e0e0e8"
FG_DIM      = "#8888aa"
FG_ACCENT   = "#7aa2f7"
FG_WHITE    = "#ffffff"
FONT        = "Helvetica"


class ExtensionRecoveryApp:

    def __init__(self, root: tk.Tk):
        self.root = root
        self.manager = ExtensionRecovery()
        self.path_var = tk.StringVar()
        self.recursive_var = tk.BooleanVar(value=False)

        self._setup_window()
        self._setup_styles()
        self._build_ui()

    # ─── Window ───────────────────────────────────────────────

    def _setup_window(self):
        self.root.title("File Extension Recovery")
        self.root.geometry("480x190")
        self.root.minsize(400, 170)
        self.root.configure(bg=BG_DARK)
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    def _setup_styles(self):
        s = ttk.Style()
        s.theme_use("clam")
        s.configure(".", background=BG_DARK, foreground=FG_TEXT, font=(FONT, 11))
        s.configure("TFrame", background=BG_DARK)
        s.configure("TLabel", background=BG_DARK, foreground=FG_TEXT)
        s.configure("Status.TLabel", background=BG_DARK, foreground=FG_DIM,
                    font=(FONT, 10))
        s.configure("TCheckbutton", background=BG_DARK, foreground=FG_TEXT)
        s.configure("Accent.TButton", background=FG_ACCENT, foreground=FG_WHITE,
                    font=(FONT, 11, "bold"), padding=(15, 6))
        s.map("Accent.TButton",
              background=[("active", "#5b8ad8"), ("disabled", "#555577")])
        s.configure("Secondary.TButton", background=BG_INPUT, foreground=FG_TEXT,
                    font=(FONT, 11), padding=(15, 6))
        s.map("Secondary.TButton", background=[("active", "#444466")])

    def _build_ui(self):
        frame = ttk.Frame(self.root, padding=10)
        frame.pack(fill=tk.BOTH, expand=True)
        frame.columnconfigure(0, weight=1)
        frame.columnconfigure(1, weight=1)

        self.path_entry = ttk.Entry(frame, textvariable=self.path_var)
        self.path_entry.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))

        self.browse_btn = ttk.Button(frame, text="Browse", style="Secondary.TButton",
                                     command=self._browse)
        self.browse_btn.grid(row=1, column=0, sticky="ew", padx=(0, 5))

        self.recover_btn = ttk.Button(frame, text="Recover Extensions",
                                      style="Accent.TButton", command=self._recover)
        self.recover_btn.grid(row=1, column=1, sticky="ew", padx=(5, 0))

        ttk.Checkbutton(frame, text="Include subfolders",
                        variable=self.recursive_var).grid(
            row=2, column=0, columnspan=2, sticky="w", pady=(8, 0))

        self.pbar = ttk.Progressbar(frame, mode="determinate", maximum=100)
        self.pbar.grid(row=3, column=0, columnspan=2, sticky="ew", pady=(8, 0))

        self.status_lbl = ttk.Label(frame, text="Ready", style="Status.TLabel")
        self.status_lbl.grid(row=4, column=0, columnspan=2, sticky="w")

    # ─── Actions ──────────────────────────────────────────────

    def _browse(self):
        current = self.path_var.get()
        p = filedialog.askdirectory(
            title="Select Directory",
            initialdir=current if os.path.isdir(current) else os.path.expanduser("~"))
        if p:
            self.path_var.set(p)

    def _recover(self):
        folder = self.path_var.get().strip()
        if not folder:
            logger.error("Displaying error dialog: no directory selected")
            messagebox.showerror("Error", "Please select a directory!")
            return
        if self.manager.is_running:
            return

        self.manager.set_callbacks(
            on_progress=self._on_progress,
            on_complete=self._on_complete,
        )
        try:
            self.manager.start(folder, recursive=self.recursive_var.get())
        except OSError as e:
            logger.error("Displaying error dialog: %s", e)
            messagebox.showerror("Error", str(e))
            return

        self.recover_btn.state(["disabled"])
        self.browse_btn.state(["disabled"])
        self.pbar["value"] = 0
        self.status_lbl.configure(text="Recovering...")

    # Callbacks fire on the worker thread; hop back onto the Tk loop.

    def _on_progress(self, p: RecoveryProgress):
        self.root.after(0, self._update_progress, p.progress_percent,
                        p.processed_files, p.total_files)

    def _update_progress(self, pct, current, total):
        self.pbar["value"] = pct
        self.status_lbl.configure(text=f"{current}/{total} files")

    def _on_complete(self, session: RecoverySession):
        self.root.after(0, self._finalize, session)

    def _finalize(self, session: RecoverySession):
        self.recover_btn.state(["!disabled"])
        self.browse_btn.state(["!disabled"])
        self.pbar["value"] = 100
        self.status_lbl.configure(
            text=f"{session.renamed_count} renamed, "
                 f"{session.unknown_count} unknown, "
                 f"{session.error_count} failed")

        if session.error:
            logger.error("Displaying error dialog: %s", session.error)
            messagebox.showerror(
                "Error",
                f"Recovery stopped: {session.error}\n\n"
                f"Processed {len(session.results)} file(s), "
                f"renamed {session.renamed_count}.")
            return

        msg = (f"Extensions recovered successfully!\n\n"
               f"Renamed: {session.renamed_count}\n"
               f"Unknown: {session.unknown_count}")
        if session.error_count:
            msg += f"\nFailed: {session.error_count} (see log)"
        logger.info("Displaying success dialog: %s renamed", session.renamed_count)
        messagebox.showinfo("Success", msg)

    def _on_close(self):
        if self.manager.is_running:
            self.manager.cancel()
        self.root.destroy()


def main():
    root = tk.Tk()
    ExtensionRecoveryApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
