"""
Issue Templates: entry point

Usage:
    # Start the resolver HTTP server
    python main.py --mode server

    # List stored templates (newest first)
    python main.py --mode list --page 1 --limit 20

    # Show which template the Create Issue dialog would prefill
    python main.py --mode match --project PROJ --issue-type 10001

    # Show global config and per-project settings
    python main.py --mode config
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional


def _configure() -> None:
    from config.logging_config import configure_logging
    configure_logging()
    from persistence.database import init_db
    init_db()


def _local_services():
    # Operator tooling runs with no request principal, so authorization is bypassed.
    from authz.policy import AllowAllPolicy
    from services.container import build_services
    return build_services(policy=AllowAllPolicy())


def start_server() -> None:
    import uvicorn
    from config.settings import settings
    _configure()
    uvicorn.run("api.server:app", host=settings.server_host, port=settings.server_port, reload=False)


def list_templates(page: int, limit: Optional[int]) -> None:
    _configure()
    result = _local_services().templates.list_templates(page, limit)

    print("\n" + "=" * 60)
    print(f"  Templates: {result.total} total (page {result.page}, {result.limit}/page)")
    print("=" * 60)
    for tpl in result.templates:
        state = "active" if tpl.active else "inactive"
        projects = ", ".join(tpl.assigned_projects) or "all projects"
        issue_types = ", ".join(tpl.assigned_issue_types) or "all issue types"
        print(f"  {tpl.id}  [{state}]  {tpl.name}")
        print(f"      scope: {projects} / {issue_types}")
    print("=" * 60 + "\n")


def show_match(project_key: str, issue_type: Optional[str]) -> None:
    _configure()
    tpl = _local_services().prefill.find_match(project_key, issue_type)
    if tpl is None:
        print(f"No active template applies to {project_key} / {issue_type or 'any issue type'}")
        return
    print(f"{tpl.id}  {tpl.name}")
    if tpl.summary:
        print(f"  summary: {tpl.summary}")


def show_config() -> None:
    _configure()
    admin = _local_services().admin
    config = admin.get_global_config()
    project_settings = admin.get_project_settings()

    print("\n" + "=" * 60)
    print(f"  Allow all users: {config.allow_all_users}")
    print(f"  Admins:          {', '.join(config.admins) or '(none)'}")
    print("  Projects:")
    if not project_settings:
        print("    (no per-project settings)")
    for key, entry in sorted(project_settings.items()):
        print(f"    {key}: {'enabled' if entry.enabled else 'disabled'}")
    print("=" * 60 + "\n")


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue Templates backend")
    parser.add_argument(
        "--mode",
        choices=["server", "list", "match", "config"],
        default="server",
        help="Run mode",
    )
    parser.add_argument("--project", help="Project key (required for --mode match)")
    parser.add_argument("--issue-type", help="Issue type id for --mode match")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=None)

    args = parser.parse_args()

    if args.mode == "server":
        start_server()
    elif args.mode == "list":
        list_templates(args.page, args.limit)
    elif args.mode == "match":
        if not args.project:
            print("ERROR: --project is required with --mode match", file=sys.stderr)
            sys.exit(1)
        show_match(args.project, args.issue_type)
    elif args.mode == "config":
        show_config()


if __name__ == "__main__":
    main()
