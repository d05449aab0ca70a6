#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Parnaso admin command line (SQLite)

Commands:
  init                Create the schema and seed default config
  promote             Grant the admin role to a registered e-mail
  export              Write a backup JSON (parnaso_* keys) to a file
  import              Load a backup JSON into the active store
  stats               Print platform totals and the top writers

Notes:
- The database is resolved like the API does: PARNASO_DB_PATH, then config.yaml.
- --config points at an alternate config.yaml (sets PARNASO_CONFIG).
"""

import argparse
import os
import sys


def _use_config(args):
    if args.config:
        os.environ["PARNASO_CONFIG"] = args.config


# ---------------- Commands ----------------

def cmd_init(args):
    _use_config(args)
    from parnaso.db import ensure_schema, get_db_path
    from parnaso.services.config_svc import ensure_default_config
    ensure_schema()
    ensure_default_config()
    print(f"DB initialized at {get_db_path()}.")


def cmd_promote(args):
    _use_config(args)
    from parnaso.logs import LogContext
    from parnaso.services.auth_svc import promote
    log = LogContext("PROMOTE_ADMIN", "cli")
    log.set_payload({"email": args.email})
    try:
        user = promote(args.email, log)
    except LookupError as e:
        log.write("ERROR", str(e))
        raise SystemExit(f"No user registered with {args.email}")
    log.write("OK")
    print(f"{user['email']} is now admin.")


def cmd_export(args):
    _use_config(args)
    from parnaso.services.backup_svc import export_backup
    content = export_backup()
    if args.out == "-":
        sys.stdout.write(content + "\n")
        return
    with open(args.out, "w", encoding="utf-8") as f:
        f.write(content)
    print(f"Backup written to {args.out}.")


def cmd_import(args):
    _use_config(args)
    from parnaso.logs import LogContext
    from parnaso.services.backup_svc import import_backup
    with open(args.file, "r", encoding="utf-8") as f:
        text = f.read()
    log = LogContext("IMPORT_BACKUP", "cli")
    log.set_payload({"filename": args.file})
    count = import_backup(text, log)
    if count == 0:
        log.write("ERROR", "nothing_imported")
        raise SystemExit("Nothing imported: not a valid backup.")
    log.write("OK")
    print(f"Imported {count} keys.")


def cmd_stats(args):
    _use_config(args)
    from parnaso.services.admin_svc import platform_stats
    s = platform_stats(args.top)
    print(f"Users:    {s['totalUsers']} ({s['activeUsers']} active, {s['blockedUsers']} blocked)")
    print(f"Words:    {s['totalWords']}")
    print(f"Sessions: {s['totalSessions']}")
    for i, w in enumerate(s["topWriters"], 1):
        print(f"{i:>3}. {w['name']:<24} {w['words']:>8} words  {w['sessions']:>4} sessions")


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="Parnaso admin (SQLite)")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create schema and default config")
    p_init.set_defaults(func=cmd_init)

    p_prom = sub.add_parser("promote", help="grant admin role")
    p_prom.add_argument("--email", required=True)
    p_prom.set_defaults(func=cmd_promote)

    p_exp = sub.add_parser("export", help="export backup JSON")
    p_exp.add_argument("--out", default="-", help="file path, '-' for stdout")
    p_exp.set_defaults(func=cmd_export)

    p_imp = sub.add_parser("import", help="import backup JSON")
    p_imp.add_argument("--file", required=True)
    p_imp.set_defaults(func=cmd_import)

    p_stats = sub.add_parser("stats", help="platform totals")
    p_stats.add_argument("--top", type=int, default=10)
    p_stats.set_defaults(func=cmd_stats)

    args = parser.parse_args(argv)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
