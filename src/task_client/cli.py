#!/usr/bin/env python3
"""Command-line front end for the task client.

Examples:
  TASKSTORE_API_BASE_URL=http://127.0.0.1:8000 task-client list
  task-client --base-url http://127.0.0.1:8000 create --title "Buy milk"
  task-client update 1 --description "2%"
  task-client delete 1
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx
from pydantic import ValidationError

from taskstore_api.logging_setup import configure_logging

from .client import TaskClient, build_client_from_env


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Call the task store API.")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Service base URL. Defaults to TASKSTORE_API_BASE_URL.",
    )
    parser.add_argument("--timeout", type=float, default=10.0, help="Request timeout in seconds.")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List all tasks.")

    get_parser = sub.add_parser("get", help="Show one task.")
    get_parser.add_argument("task_id", type=int)

    create_parser = sub.add_parser("create", help="Create a task.")
    create_parser.add_argument("--title", required=True)
    create_parser.add_argument("--description", default=None)

    update_parser = sub.add_parser("update", help="Update title and/or description.")
    update_parser.add_argument("task_id", type=int)
    update_parser.add_argument("--title", default=None)
    group = update_parser.add_mutually_exclusive_group()
    group.add_argument("--description", default=None)
    group.add_argument(
        "--clear-description",
        action="store_true",
        help="Set description to null.",
    )

    delete_parser = sub.add_parser("delete", help="Delete a task.")
    delete_parser.add_argument("task_id", type=int)

    return parser.parse_args(argv)


def _update_fields(args: argparse.Namespace) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if args.title is not None:
        fields["title"] = args.title
    if args.clear_description:
        fields["description"] = None
    elif args.description is not None:
        fields["description"] = args.description
    return fields


async def run_command(client: TaskClient, args: argparse.Namespace) -> Any:
    if args.command == "list":
        tasks = await client.list_tasks()
        return [task.model_dump(mode="json") for task in tasks]
    if args.command == "get":
        return (await client.get_task(args.task_id)).model_dump(mode="json")
    if args.command == "create":
        task = await client.create_task({"title": args.title, "description": args.description})
        return task.model_dump(mode="json")
    if args.command == "update":
        task = await client.update_task(args.task_id, _update_fields(args))
        return task.model_dump(mode="json")
    if args.command == "delete":
        await client.delete_task(args.task_id)
        return {"deleted": args.task_id}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.base_url:
        client = TaskClient(args.base_url, timeout_s=args.timeout)
    else:
        try:
            client = build_client_from_env(timeout_s=args.timeout)
        except RuntimeError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2

    try:
        result = asyncio.run(run_command(client, args))
    except httpx.HTTPStatusError as exc:
        print(
            f"error: HTTP {exc.response.status_code} from {exc.request.url}: {exc.response.text}",
            file=sys.stderr,
        )
        return 1
    except httpx.TransportError as exc:
        print(f"error: request to {client.base_url} failed: {exc!r}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"error: invalid fields: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
