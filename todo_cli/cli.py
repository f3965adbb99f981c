#!/usr/bin/env python3
"""
todo - CLI Interface
====================
Command-line tool for managing personal tasks in a local SQLite file.

Usage:
    todo add "Write report" --due 2030-01-15 -p high
    todo list
    todo list --completed --priority high
    todo update 3 --title "Write final report"
    todo complete 3
    todo show 3
    todo delete 3
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_settings
from .errors import StorageError, TaskNotFoundError, TaskValidationError
from .manager import TaskManager
from .render import detail_report, list_report, task_to_dict, tasks_to_dicts
from .store import TaskStore

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2
EXIT_STORAGE = 3

PRIORITY_CHOICES = ["low", "medium", "high"]

logger = logging.getLogger("todo")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo",
        description="todo - A simple task manager with SQLite storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  todo add "Pay rent" -d 2030-02-01 -p high   Add a task due on a date
  todo add "Call Bob" --description "re: trip" Add a task with a description
  todo list                                   Pending tasks, most important first
  todo list -c -p low                         Include completed, only low priority
  todo update 4 -d 2030-03-01T09:00:00Z       Move a due date
  todo complete 4                             Mark task 4 as completed
  todo show 4                                 Show all details of task 4
  todo delete 4                               Delete task 4
        """
    )
    parser.add_argument("--db", help="Path to the SQLite file (default: ~/.todo.db or TODO_DB)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log what is being done")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ADD command
    add_parser = subparsers.add_parser("add", help="Add a new task")
    add_parser.add_argument("title", help="Task title")
    add_parser.add_argument("--description", help="Task description")
    add_parser.add_argument("-d", "--due", help="Due date (YYYY-MM-DD or RFC3339)")
    add_parser.add_argument(
        "-p", "--priority", choices=PRIORITY_CHOICES, default="medium",
        help="Priority level (default: medium)"
    )

    # LIST command
    list_parser = subparsers.add_parser("list", help="List tasks")
    list_parser.add_argument("-c", "--completed", action="store_true", help="Show completed tasks")
    list_parser.add_argument("-p", "--priority", choices=PRIORITY_CHOICES, help="Filter by priority")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # COMPLETE command
    complete_parser = subparsers.add_parser("complete", help="Mark a task as completed")
    complete_parser.add_argument("id", type=int, help="Task ID")

    # DELETE command
    delete_parser = subparsers.add_parser("delete", help="Delete a task")
    delete_parser.add_argument("id", type=int, help="Task ID")

    # UPDATE command
    update_parser = subparsers.add_parser("update", help="Update a task")
    update_parser.add_argument("id", type=int, help="Task ID")
    update_parser.add_argument("-t", "--title", help="New title")
    update_parser.add_argument("--description", help="New description")
    update_parser.add_argument("-d", "--due", help="New due date (YYYY-MM-DD or RFC3339)")
    update_parser.add_argument("-p", "--priority", choices=PRIORITY_CHOICES, help="New priority level")

    # SHOW command
    show_parser = subparsers.add_parser("show", help="Show details of a specific task")
    show_parser.add_argument("id", type=int, help="Task ID")
    show_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def run(args: argparse.Namespace, manager: TaskManager, color: bool) -> int:
    if args.command == "add":
        task_id = manager.add_task(
            title=args.title,
            description=args.description,
            due=args.due,
            priority=args.priority,
        )
        print(f"✅ Task added successfully with ID: {task_id}")

    elif args.command == "list":
        tasks = manager.list_tasks(include_completed=args.completed, priority=args.priority)
        if args.json:
            print(json.dumps(tasks_to_dicts(tasks), indent=2))
        else:
            print(list_report(tasks, color=color))

    elif args.command == "complete":
        manager.complete_task(args.id)
        print(f"✅ Task {args.id} marked as completed!")

    elif args.command == "delete":
        manager.delete_task(args.id)
        print(f"🗑️  Task {args.id} deleted successfully!")

    elif args.command == "update":
        manager.update_task(
            args.id,
            title=args.title,
            description=args.description,
            due=args.due,
            priority=args.priority,
        )
        print(f"✅ Task {args.id} updated successfully!")

    elif args.command == "show":
        task = manager.show_task(args.id)
        if args.json:
            print(json.dumps(task_to_dict(task), indent=2))
        else:
            print(detail_report(task, color=color))

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_INVALID

    settings = load_settings()
    logging.basicConfig(
        level=logging.INFO if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    db_path = Path(args.db).expanduser().resolve() if args.db else settings.db_path
    color = settings.color and not args.no_color

    try:
        with TaskStore(db_path) as store:
            store.initialize()
            return run(args, TaskManager(store), color)
    except TaskNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except TaskValidationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INVALID
    except StorageError as e:
        logger.debug("Storage failure", exc_info=True)
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_STORAGE


if __name__ == "__main__":
    sys.exit(main())
