"""
memvfs interactive shell.

Usage:
    memvfs                                  # interactive prompt
    memvfs --capacity 1024                  # start with a larger disk
    memvfs --store ./disk.json              # store/load from a specific file
    memvfs -c "newDir notes" -c "rList"     # run commands and exit

Configuration is read from the environment (and a .env file, if present):
    MEMVFS_CAPACITY, MEMVFS_STORAGE, MEMVFS_STORE_PATH, MEMVFS_DEBUG
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.styles import Style

from memvfs.config import VFSConfig
from memvfs.history import HistoryManager
from memvfs.shell import CommandShell
from memvfs.types import ToolResult

# Style for the prompt
PROMPT_STYLE = Style.from_dict({
    "path": "ansigreen bold",
    "prompt": "ansicyan bold",
})


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    GRAY = "\033[90m"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Set up console logging for the memvfs package."""
    logger = logging.getLogger("memvfs")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if logger.handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if debug else logging.ERROR)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger


def print_result(result: ToolResult) -> None:
    """Print a ToolResult, colored by status."""
    if not result.message:
        return
    if result.ok:
        print(result.message)
    else:
        print(f"{Colors.RED}✗ {result.message}{Colors.RESET}")


def build_config(args: argparse.Namespace) -> VFSConfig:
    """Environment configuration overridden by command-line flags."""
    config = VFSConfig.from_env()
    if args.capacity is not None:
        config.disk.default_capacity = args.capacity
    if args.storage:
        config.storage.provider = args.storage
    if args.store:
        config.storage.path = args.store
    if args.debug:
        config.debug = True
    return config


def create_prompt_session(config: VFSConfig) -> PromptSession:
    """Create a prompt session with persistent history when possible."""
    history_path = config.shell.get_history_path()
    try:
        history_path.parent.mkdir(parents=True, exist_ok=True)
        return PromptSession(history=FileHistory(str(history_path)), style=PROMPT_STYLE)
    except OSError:
        return PromptSession(history=InMemoryHistory(), style=PROMPT_STYLE)


def run_repl(shell: CommandShell, config: VFSConfig) -> None:
    """Read commands until quit or end of input."""
    session = create_prompt_session(config)
    print(f"{Colors.GRAY}memvfs - type 'help' for commands, 'quit' to leave{Colors.RESET}")

    while not shell.should_exit:
        try:
            line = session.prompt(
                [
                    ("class:path", shell.manager.working_path()),
                    ("class:prompt", f" {config.shell.prompt}"),
                ]
            )
        except KeyboardInterrupt:
            continue
        except EOFError:
            break

        print_result(shell.execute(line))


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="In-memory virtual file system shell")
    parser.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="Capacity of the initial disk in bytes (default: 255)",
    )
    parser.add_argument(
        "--store",
        type=str,
        default=None,
        help="File used by the store and load commands",
    )
    parser.add_argument(
        "--storage",
        type=str,
        default=None,
        choices=["json", "sqlite"],
        help="Storage format for the store file (default: json)",
    )
    parser.add_argument(
        "-c",
        "--command",
        action="append",
        default=None,
        help="Run a command non-interactively (may be repeated)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        setup_logging(config.debug)
        shell = CommandShell(HistoryManager(config))
    except ValueError as e:
        print(f"{Colors.RED}✗ {e}{Colors.RESET}", file=sys.stderr)
        return 2

    if args.command:
        exit_code = 0
        for line in args.command:
            result = shell.execute(line)
            print_result(result)
            if not result.ok:
                exit_code = 1
            if shell.should_exit:
                break
        return exit_code

    run_repl(shell, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
