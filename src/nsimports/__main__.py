"""nsimports - namespace-import completions for TypeScript workspaces."""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_HELP = """\
Usage: nsimports index [--dir <path>]
       nsimports query <file> <prefix> [--dir <path>]

Commands:
  index              Index the workspace and print a per-project summary
  query              Print completions for <prefix> as seen from <file>

Options:
  --dir <path>       Workspace folder (default: current directory)
  --help, -h         Show this help message and exit

Examples:
  nsimports index --dir ~/src/monorepo
  nsimports query packages/app/src/main.ts use
"""


def main() -> None:
    """Entry point for the nsimports CLI."""
    args = sys.argv[1:]

    if not args or "--help" in args or "-h" in args:
        print(_HELP)
        sys.exit(0)

    if args[0] == "index":
        _run_index(args[1:])
    elif args[0] == "query":
        _run_query(args[1:])
    else:
        print(f"Unknown command: {args[0]}")
        print("Run 'nsimports --help' for usage.")
        sys.exit(1)


def _parse_dir(args: list[str]) -> tuple[Path, list[str]]:
    """Pull ``--dir <path>`` out of *args*; return (dir, remaining positionals)."""
    workspace_dir = Path.cwd()
    rest: list[str] = []
    i = 0
    while i < len(args):
        if args[i] == "--dir" and i + 1 < len(args):
            workspace_dir = Path(args[i + 1])
            i += 2
        elif args[i].startswith("--"):
            print(f"Unknown argument: {args[i]}")
            print("Run 'nsimports --help' for usage.")
            sys.exit(1)
        else:
            rest.append(args[i])
            i += 1
    return workspace_dir.resolve(), rest


def _setup_logging(level: str) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _make_service(workspace_dir: Path):
    from nsimports.core.config import load_config
    from nsimports.index.schema import WorkspaceFolder
    from nsimports.index.service import CompletionService

    config = load_config(workspace_dir)
    _setup_logging(config.log_level)
    folder = WorkspaceFolder(name=workspace_dir.name or "/", root=workspace_dir.as_posix())
    return folder, CompletionService([folder], settings=config.index)


def _run_index(args: list[str]) -> None:
    """Build the workspace index and print a summary table."""
    workspace_dir, rest = _parse_dir(args)
    if rest:
        print(f"Unknown argument: {rest[0]}")
        print("Usage: nsimports index [--dir <path>]")
        sys.exit(1)

    from rich.console import Console
    from rich.table import Table

    folder, service = _make_service(workspace_dir)
    state = service.state(folder.name)
    if state is None:
        print(f"Failed to index {workspace_dir}")
        sys.exit(1)

    stats = state.stats()
    console = Console()
    console.print(
        f"Indexed {folder.name}: {stats.total_projects} projects, "
        f"{stats.total_files} files, {stats.total_records} records",
        soft_wrap=True,
    )
    table = Table(title=folder.name)
    table.add_column("Project")
    table.add_column("Records", justify="right")
    for root, count in stats.records_by_project.items():
        table.add_row(Path(root).relative_to(workspace_dir).as_posix(), str(count))
    console.print(table)


def _run_query(args: list[str]) -> None:
    """Print completions for a prefix typed in a given file."""
    workspace_dir, rest = _parse_dir(args)
    if len(rest) != 2:
        print("Usage: nsimports query <file> <prefix> [--dir <path>]")
        sys.exit(1)

    from rich.console import Console

    file_arg, prefix = rest
    current = Path(file_arg)
    if not current.is_absolute():
        current = workspace_dir / current

    _folder, service = _make_service(workspace_dir)
    completions = service.query_completions(current.resolve().as_posix(), prefix)

    console = Console()
    if not completions:
        console.print("No completions.")
        return
    for completion in completions:
        console.print(completion.import_statement(), markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    main()
