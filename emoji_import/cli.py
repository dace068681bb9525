from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from playwright.sync_api import Error as PlaywrightError

from .config import ON_ERROR_CHOICES, collect_user_input, normalize_host
from .errors import ConfigError, ManifestError

logger = logging.getLogger("emoji_import")

EXIT_OK = 0
EXIT_ITEMS_FAILED = 1
EXIT_AUTH_FAILED = 2
EXIT_CONFIG = 3
EXIT_IO = 4
EXIT_INTERRUPTED = 130


def configure_logging(verbose: bool = False) -> None:
    level_name = os.environ.get("SLACK_EMOJI_IMPORT_LOG_LEVEL", "DEBUG" if verbose else "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)-7s %(message)s",
        datefmt="%H:%M:%S",
    )


def _add_upload_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--yaml", help="emoji manifest (emojipacks YAML)")
    ap.add_argument("--host", help="Slack workspace, e.g. 'acme' for acme.slack.com")
    ap.add_argument("--email")
    ap.add_argument("--password")
    ap.add_argument("--show", action="store_true", default=None, help="run the browser visibly")
    ap.add_argument("--on-error", dest="on_error", choices=ON_ERROR_CHOICES)
    ap.add_argument("--throttle-ms", dest="throttle_ms", type=int)
    ap.add_argument("--wait-timeout-ms", dest="wait_timeout_ms", type=int)
    ap.add_argument("--add-button-timeout-ms", dest="add_button_timeout_ms", type=int, help="0 waits forever")
    ap.add_argument("--state", dest="storage_state", help="stored session file (see init-session)")
    ap.add_argument("--save-state", dest="save_storage_state", action="store_true", default=None)
    ap.add_argument("--channel", dest="browser_channel", help="installed browser channel, e.g. chrome or msedge")
    ap.add_argument("--debug-dir", dest="debug_dir", help="folder for failure screenshots/html")
    ap.add_argument("--no-history", dest="history", action="store_false", default=None)
    ap.add_argument("--no-input", dest="interactive", action="store_false", help="never prompt")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="slack-emoji-import", description="Bulk upload custom emoji to Slack")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command")

    _add_upload_args(sub.add_parser("upload", help="upload every emoji in a manifest (default)"))

    hist = sub.add_parser("history", help="show recorded upload runs")
    hist.add_argument("--run", type=int, help="list failed items of one run")
    hist.add_argument("--limit", type=int, default=10)

    init = sub.add_parser("init-session", help="sign in by hand and save the session for later runs")
    init.add_argument("--host", required=True)
    init.add_argument("--state", required=True)
    init.add_argument("--channel", default="")
    init.add_argument("--slowmo", type=int, default=250)
    return ap


def cmd_upload(args: argparse.Namespace) -> int:
    from . import batch
    from .manifest import load_emoji_pack

    cli_values = {k: v for k, v in vars(args).items() if v is not None}
    try:
        config = collect_user_input(cli_values, interactive=getattr(args, "interactive", True))
        logger.info("loading emoji YAML file...")
        pack = load_emoji_pack(config.yaml)
    except (ConfigError, ManifestError) as e:
        logger.error("%s", e)
        return EXIT_CONFIG

    logger.info("%s: %d emojis for %s.slack.com", pack.title or config.yaml, len(pack.emojis), config.host)

    recorder = None
    db = None
    if config.history:
        from .db import SessionLocal, init_db
        from .services import RunRecorder

        init_db()
        db = SessionLocal()
        recorder = RunRecorder(db)

    try:
        report = batch.run(config, pack, recorder=recorder)
    except (PlaywrightError, OSError) as e:
        logger.error("browser or file error: %s", e)
        return EXIT_IO
    finally:
        if db is not None:
            db.close()

    print(report.summary())
    if report.auth_error is not None:
        return EXIT_AUTH_FAILED
    return EXIT_OK if report.ok else EXIT_ITEMS_FAILED


def cmd_history(args: argparse.Namespace) -> int:
    from .db import init_db, session_scope
    from .services import failed_attempts, recent_runs, uploaded_count

    init_db()
    with session_scope() as db:
        if args.run is not None:
            rows = failed_attempts(db, args.run)
            if not rows:
                print(f"run {args.run}: no failed items")
            for a in rows:
                print(f"#{a.position + 1} {a.name} ({a.src}): {a.error}")
            return EXIT_OK

        for r in recent_runs(db, args.limit):
            started = r.started_at.strftime("%Y-%m-%d %H:%M") if r.started_at else "?"
            print(f"{r.id:>4} {started} {r.host:<20} {r.status:<12} {uploaded_count(db, r.id):>4} ok  {r.title or ''}")
        return EXIT_OK


def cmd_init_session(args: argparse.Namespace) -> int:
    from .browser import init_session

    init_session(normalize_host(args.host), args.state, slowmo_ms=args.slowmo, channel=args.channel)
    return EXIT_OK


COMMANDS = ("upload", "history", "init-session")


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    # "upload" is the default subcommand
    pos = 0
    while pos < len(argv) and argv[pos] in ("-v", "--verbose"):
        pos += 1
    if pos == len(argv) or argv[pos] not in COMMANDS + ("-h", "--help"):
        argv.insert(pos, "upload")
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    handlers = {"upload": cmd_upload, "history": cmd_history, "init-session": cmd_init_session}
    try:
        return handlers[args.command](args)
    except KeyboardInterrupt:
        logger.error("interrupted")
        return EXIT_INTERRUPTED
