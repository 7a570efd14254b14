#!/usr/bin/env python3
"""Create a parent Jira ticket with FED, BED and QA sub-tasks.

Usage:
    python scripts/create_jira_tickets.py --project DPWOR --component Footer

    # Custom descriptions (empty keeps the default text):
    python scripts/create_jira_tickets.py --component Header --fed "Build the header"

Requires:
    - ATLASSIAN_EMAIL, ATLASSIAN_TOKEN env vars (or --email / --token)
    - ATLASSIAN_BASE_URL env var (or --site)
"""
from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from figdoc import config  # noqa: E402
from figdoc.documents.tickets import (  # noqa: E402
    TicketSet,
    create_component_with_subtasks,
    default_ticket_plan,
)
from figdoc.integrations.atlassian import AtlassianCredentials  # noqa: E402
from figdoc.integrations.jira_client import JiraClient  # noqa: E402
from figdoc.logging_config import get_core_logger  # noqa: E402

DEFAULT_PROJECT = os.getenv("JIRA_PROJECT", "")
DEFAULT_COMPONENT = os.getenv("COMPONENT_NAME", "Footer")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create a parent ticket with FED/BED/QA sub-tasks",
    )
    parser.add_argument(
        "--site", default=config.ATLASSIAN_BASE_URL,
        help="Atlassian site URL (default: ATLASSIAN_BASE_URL)",
    )
    parser.add_argument("--email", default=os.getenv("ATLASSIAN_EMAIL", ""))
    parser.add_argument("--token", default=os.getenv("ATLASSIAN_TOKEN", ""))
    parser.add_argument(
        "--project", default=DEFAULT_PROJECT,
        help="Jira project key (default: JIRA_PROJECT)",
    )
    parser.add_argument(
        "--component", default=DEFAULT_COMPONENT,
        help=f"Component name (default: {DEFAULT_COMPONENT})",
    )
    for role in ("parent", "fed", "bed", "qa"):
        parser.add_argument(
            f"--{role}", default="",
            help=f"Custom {role.upper()} description (empty for default)",
        )
    return parser.parse_args(argv)


def print_summary(result: TicketSet) -> None:
    print(f"\n{'='*60}")
    print("  SUMMARY")
    print(f"{'='*60}")
    if result.parent.key:
        print(f"\nParent: {result.parent.key}")
        print(f"  {result.parent.url}")
    for role, ref in result.subtasks.items():
        print(f"\n{role.upper()}: {ref.key}")
        print(f"  {ref.url}")

    print(f"\nCompleted: {len(result.completed_tasks)}")
    for entry in result.completed_tasks:
        print(f"  - {entry}")
    if result.failed_tasks:
        print(f"\nFailed: {len(result.failed_tasks)}")
        for entry in result.failed_tasks:
            print(f"  - {entry}")


async def run(args: argparse.Namespace) -> TicketSet:
    plan = default_ticket_plan(args.component).with_overrides({
        "parent": args.parent, "fed": args.fed, "bed": args.bed, "qa": args.qa,
    })
    jira = JiraClient(AtlassianCredentials(args.site, args.email, args.token))
    try:
        return await create_component_with_subtasks(jira, args.project, args.component, plan)
    finally:
        await jira.close()


def main(argv=None) -> int:
    args = parse_args(argv)
    get_core_logger()

    missing = [
        name for name, value in (
            ("--site", args.site), ("--email", args.email),
            ("--token", args.token), ("--project", args.project),
        )
        if not value
    ]
    if missing:
        print(f"Error: missing {', '.join(missing)}")
        return 1

    print(f"Creating tickets for: {args.component}")
    print(f"Project: {args.project}\n")
    result = asyncio.run(run(args))
    print_summary(result)
    return 0 if result.parent.key and not result.failed_tasks else 1


if __name__ == "__main__":
    sys.exit(main())
