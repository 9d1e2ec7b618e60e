"""
Entry point for the WordPress course-content sync tool.

Usage::

    python main.py audit
    python main.py parse-xml docs/learndash-export.xml
    python main.py sync-content docs/learndash-export.xml           # dry run
    python main.py sync-content docs/learndash-export.xml --apply   # writes fills
"""

import argparse
import json
import sys

from course_sync.models import ACTIONS
from course_sync.sync_tool import CourseContentSyncTool

CONFIG_FILE = "config/sync_config.json"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile a LearnDash export with the course database.")
    parser.add_argument("action", choices=ACTIONS, help="Operation to run.")
    parser.add_argument("xml_path", nargs="?", help="Export file (required for parse-xml and sync-content).")
    parser.add_argument("--apply", action="store_true", help="Write the proposed fills (sync-content only).")
    parser.add_argument("--config", default=CONFIG_FILE, help="JSON configuration file.")
    parser.add_argument("--db", help="DuckDB file; overrides database.path from the configuration.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Build a request from the command line, run it and print the JSON response.
    """
    args = parse_args(argv)
    tool = CourseContentSyncTool(config_file=args.config)
    if args.db:
        tool.config["database"]["path"] = args.db

    body = {"action": args.action, "dryRun": not args.apply}
    if args.xml_path:
        try:
            with open(args.xml_path, "r", encoding="utf-8") as f:
                body["xmlContent"] = f.read()
        except OSError as e:
            tool.log_message(f"Could not read export file '{args.xml_path}': {e}", level="ERROR")
            return 1

    status, payload = tool.handle_request(body)
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if status == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
