#!/usr/bin/env python3
"""
File Extension Recovery — Entry Point.

Usage:
    python main.py                          # GUI mode
    python main.py --cli -d ~/recovered     # Terminal mode
    python main.py --cli -d DIR --preview   # Show what would be renamed
"""

APP_VERSION = "1.0"

import os
import sys
import time
import logging
import argparse


def cli_mode(args):
    from extrecover.manager import (
        ExtensionRecovery, RecoveryProgress,
        STATUS_ERROR, STATUS_PLANNED, STATUS_RENAMED,
    )

    print("=" * 60)
    print(f"  File Extension Recovery  v{APP_VERSION}")
    print("  Restore extensions from file content")
    print("=" * 60)
    print()

    if args.directory:
        folder = args.directory
    else:
        try:
            folder = input("Directory: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n  Aborted.")
            sys.exit(0)
        if not folder:
            print("Please select a directory!", file=sys.stderr)
            sys.exit(1)
    folder = os.path.expanduser(folder)

    print(f"Directory:  {folder}")
    print(f"Recursive:  {'yes' if args.recursive else 'no'}")
    print(f"Mode:       {'Preview' if args.preview else 'Rename'}")
    print()

    manager = ExtensionRecovery()
    ll = 0

    def on_progress(p: RecoveryProgress):
        nonlocal ll
        pct = p.progress_percent
        bw = 30
        filled = int(bw * pct / 100)
        bar = "█" * filled + "░" * (bw - filled)
        line = (f"\r  [{bar}] {pct:5.1f}%  "
                f"{p.processed_files}/{p.total_files}  Renamed: {p.renamed}")
        pad = max(0, ll - len(line))
        sys.stdout.write(line + " " * pad)
        sys.stdout.flush()
        ll = len(line)

    manager.set_callbacks(on_progress=on_progress)

    start = time.time()
    try:
        session = manager.recover(
            folder,
            preview_only=args.preview,
            recursive=args.recursive,
            skip_matching=args.skip_matching,
        )
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n  Aborted.")
        sys.exit(130)
    elapsed = time.time() - start
    print("\n")

    print(f"{'=' * 60}")
    print(f"  Done in {elapsed:.1f}s — Checked {len(session.results)} file(s)")
    print(f"{'=' * 60}")

    by_ext = session.files_by_extension
    if by_ext:
        print()
        print(f"  {'Ext':7s} {'Count':>6s}  {'Size':>10s}")
        print(f"  {'-'*7} {'-'*6}  {'-'*10}")
        for ext in sorted(by_ext):
            files = by_ext[ext]
            print(f"    .{ext:5s}  {len(files):4d}    "
                  f"{_fmt(sum(f.size for f in files)):>10s}")

    done = session.planned_count if args.preview else session.renamed_count
    print()
    print(f"  {'Would rename' if args.preview else 'Renamed'}: {done}")
    print(f"  Unknown:  {session.unknown_count}")
    if session.skipped_count:
        print(f"  Skipped:  {session.skipped_count}")
    if session.error_count:
        print(f"  Errors:   {session.error_count}")

    if args.preview and done:
        print(f"\n  {'─' * 55}")
        for r in session.results:
            if r.status == STATUS_PLANNED:
                print(f"    {r.display_name}  →  {os.path.basename(r.new_path)}")
    elif args.verbose and done:
        print(f"\n  {'─' * 55}")
        for r in session.results:
            if r.status == STATUS_RENAMED:
                print(f"    {r.display_name}  →  {os.path.basename(r.new_path)}")

    if session.error_count:
        print(f"\n  {'─' * 55}")
        print(f"  ⚠️  Failed ({session.error_count}):")
        for r in session.results:
            if r.status == STATUS_ERROR:
                print(f"    {r.display_name}: {r.error}")

    if args.log:
        manager.save_log(args.log)
        print(f"\n  Log: {args.log}")
    if args.csv:
        manager.export_report_csv(args.csv)
        print(f"  CSV: {args.csv}")
    print()


def _fmt(n):
    s = float(n)
    for u in ("B", "KB", "MB", "GB"):
        if s < 1024:
            return f"{s:.1f} {u}"
        s /= 1024
    return f"{s:.1f} TB"


def _log_level(args):
    if args.verbose:
        return logging.DEBUG
    return logging.WARNING if args.cli else logging.INFO


def main():
    parser = argparse.ArgumentParser(
        description="Restore missing file extensions from file content.")
    parser.add_argument("--cli", action="store_true", help="Terminal mode")
    parser.add_argument("-d", "--directory", default="", help="Folder to process")
    parser.add_argument("-r", "--recursive", action="store_true",
                        help="Also process subfolders")
    parser.add_argument("--preview", action="store_true",
                        help="Detect without renaming")
    parser.add_argument("--skip-matching", action="store_true",
                        help="Leave files that already have the detected extension")
    parser.add_argument("--log", default="", help="Write a JSON log to this path")
    parser.add_argument("--csv", default="", help="Write a CSV report to this path")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging and per-file output")
    args = parser.parse_args()

    logging.basicConfig(
        level=_log_level(args),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.cli:
        cli_mode(args)
    else:
        from app import main as gui
        gui()


if __name__ == "__main__":
    main()
