#!/usr/bin/env python3
"""
bfav - Browser Favorites

Command-line interface: import browser bookmark exports into Markdown
bookmark tables, remove duplicate rows and check bookmarks for
accessibility.
"""
import sys
import argparse
import json
import logging
import signal
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn

from bfav.cancellation import CancellationToken
from bfav.config import BfavConfig, init_config
from bfav.exceptions import BfavError
from bfav.health_checker import MetaFetcher, check_accessibility, collect_documents
from bfav.importers import read_export
from bfav.sync import cleanup_duplicates, import_bookmarks
from bfav.vault import FileVault

logger = logging.getLogger(__name__)


console = Console()


def get_vault(config: BfavConfig) -> FileVault:
    return FileVault(config.get_vault_path())


@contextmanager
def cancel_on_interrupt(token: CancellationToken):
    """Turn Ctrl-C into a cancellation request for the running pass."""
    def handler(signum, frame):
        console.print("\n[yellow]Cancelling after the current bookmark...[/yellow]")
        token.cancel()

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def select_documents(documents: Dict[str, int], names: Optional[List[str]],
                     assume_yes: bool, action: str) -> List[str]:
    """
    Decide which documents a batch pass works on.

    Explicit ``--file`` names win; otherwise the user confirms "all" or
    picks documents by number.
    """
    if names:
        wanted = {name if name.endswith(".md") else f"{name}.md" for name in names}
        return [path for path in documents if Path(path).name in wanted]

    total = sum(documents.values())
    if assume_yes:
        return list(documents)

    if Confirm.ask(f"Found {total} bookmarks in {len(documents)} files. {action} all?", default=True):
        return list(documents)

    paths = list(documents)
    table = Table(title="Bookmark files")
    table.add_column("#", style="cyan")
    table.add_column("File", style="green")
    table.add_column("Bookmarks", style="magenta")
    for number, path in enumerate(paths, 1):
        table.add_row(str(number), Path(path).stem, str(documents[path]))
    console.print(table)

    answer = Prompt.ask("Files to use (comma separated numbers)", default="")
    selected = []
    for part in answer.split(","):
        part = part.strip()
        if part.isdigit() and 1 <= int(part) <= len(paths):
            selected.append(paths[int(part) - 1])
    return selected


def cmd_import(args):
    """Import a browser bookmark export."""
    config = args.config_obj
    path = Path(args.file)

    report = import_bookmarks(get_vault(config), config.output_folder_path, read_export(path))

    if args.output == "json":
        print(json.dumps({
            "processed": report.processed,
            "added": report.added,
            "skipped_existing": report.skipped_existing,
            "files": report.files,
        }, indent=2))
        return

    table = Table(title="Imported Bookmarks")
    table.add_column("Category", style="cyan")
    table.add_column("Section", style="green")
    table.add_column("Added", style="magenta")
    for (category, subcategory), count in sorted(report.sections.items()):
        table.add_row(category, subcategory, str(count))
    console.print(table)

    console.print(
        f"[green]✓ Import completed! {report.processed} bookmarks processed, "
        f"{report.added} added, {report.skipped_existing} already present[/green]"
    )


def cmd_check(args):
    """Check stored bookmarks for accessibility."""
    config = args.config_obj

    if not config.check_accessibility:
        console.print("[yellow]Bookmark accessibility checking is disabled. "
                      "Enable it in the configuration first.[/yellow]")
        return

    vault = get_vault(config)
    documents = collect_documents(vault, config.output_folder_path)
    if not sum(documents.values()):
        console.print("[yellow]No bookmarks found to check![/yellow]")
        return

    files = select_documents(documents, args.file, args.yes, "Check")
    if not files:
        console.print("[yellow]No files selected for checking.[/yellow]")
        return

    fetcher = MetaFetcher(timeout=config.timeout, user_agent=config.user_agent,
                          verify_ssl=config.verify_ssl)
    delay = args.delay if args.delay is not None else config.check_delay
    total = sum(documents[path] for path in files)

    with cancel_on_interrupt(CancellationToken()) as token, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
        disable=args.output == "json",
    ) as progress:
        task = progress.add_task("Checking bookmarks...", total=total)

        def update_progress(path, checked, _total, report):
            progress.update(
                task,
                completed=checked,
                description=f"{Path(path).stem}  ✅ {report.accessible} | ❌ {report.inaccessible}",
            )

        report = check_accessibility(
            vault,
            config.output_folder_path,
            fetcher,
            token=token,
            delay=delay,
            files=files,
            progress_callback=update_progress,
        )

    if args.output == "json":
        print(json.dumps(report.to_dict(), indent=2))
        return

    table = Table(title="Accessibility Check Results")
    table.add_column("Status", style="cyan")
    table.add_column("Count", style="green")
    table.add_row("✅ Accessible", str(report.accessible), style="green")
    table.add_row("❌ Inaccessible", str(report.inaccessible), style="red")
    console.print(table)

    if report.errors:
        console.print("\n[red]Inaccessible Bookmarks:[/red]")
        for url, error in report.errors:
            console.print(f"  {url[:70]}")
            console.print(f"       Error: {error}")

    if report.cancelled:
        console.print(f"\n[yellow]Accessibility check cancelled after {report.checked} bookmarks[/yellow]")
    else:
        console.print("\n[green]✓ Accessibility check complete![/green]")


def cmd_dedup(args):
    """Remove duplicate rows from the stored documents."""
    config = args.config_obj
    vault = get_vault(config)

    documents = collect_documents(vault, config.output_folder_path)
    if not sum(documents.values()):
        console.print("[yellow]No bookmarks found to deduplicate![/yellow]")
        return

    files = select_documents(documents, args.file, args.yes, "Deduplicate")
    if not files:
        console.print("[yellow]No files selected for deduplication.[/yellow]")
        return

    with cancel_on_interrupt(CancellationToken()) as token:
        report = cleanup_duplicates(vault, config.output_folder_path, token=token, files=files)

    if report.cancelled:
        console.print("[yellow]Deduplication cancelled![/yellow]")
    console.print(
        f"[green]✓ Processed {report.processed} bookmarks, "
        f"removed {report.duplicates_removed} duplicates[/green]"
    )


def cmd_config(args):
    """Show or save the configuration."""
    config = args.config_obj

    if args.config_command == "init":
        path = Path(args.path) if args.path else None
        config.save(path)
        console.print(f"[green]✓ Configuration saved to {path or '~/.config/bfav/config.toml'}[/green]")
        return

    if args.output == "json":
        print(json.dumps(asdict(config), indent=2))
        return

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for key, value in asdict(config).items():
        table.add_row(key, str(value))
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfav",
        description="bfav - keep browser favorites as Markdown bookmark tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bfav import bookmarks.html
  bfav --vault ~/notes check --yes
  bfav dedup --file News
  bfav config show

Configuration:
  Config file: ~/.config/bfav/config.toml or ./bfav.toml
  Environment: BFAV_VAULT_PATH, BFAV_OUTPUT_FOLDER_PATH, BFAV_CHECK_DELAY
        """
    )

    parser.add_argument("--vault", help="Vault directory (default: current directory)")
    parser.add_argument("--output-folder", help="Folder inside the vault for bookmark files")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("-o", "--output", choices=["table", "json"], default="table",
                        help="Output format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    p_import = subparsers.add_parser("import", help="Import a browser bookmark export (HTML)")
    p_import.add_argument("file", help="Exported bookmarks HTML file")
    p_import.set_defaults(func=cmd_import)

    p_check = subparsers.add_parser("check", help="Check bookmarks for accessibility")
    p_check.add_argument("--file", action="append", help="Only check this bookmark file (repeatable)")
    p_check.add_argument("-y", "--yes", action="store_true", help="Check all files without asking")
    p_check.add_argument("--delay", type=float, help="Seconds to wait between two checks")
    p_check.set_defaults(func=cmd_check)

    p_dedup = subparsers.add_parser("dedup", help="Remove duplicate bookmark rows")
    p_dedup.add_argument("--file", action="append", help="Only clean this bookmark file (repeatable)")
    p_dedup.add_argument("-y", "--yes", action="store_true", help="Clean all files without asking")
    p_dedup.set_defaults(func=cmd_dedup)

    p_config = subparsers.add_parser("config", help="Configuration")
    config_subparsers = p_config.add_subparsers(dest="config_command", required=True)
    config_subparsers.add_parser("show", help="Show the effective configuration")
    config_init = config_subparsers.add_parser("init", help="Write the configuration to a file")
    config_init.add_argument("path", nargs="?", help="Target file (default: user config)")
    p_config.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = init_config(
        config_file=Path(args.config) if args.config else None,
        vault_path=args.vault,
        output_folder_path=args.output_folder,
    )
    args.config_obj = config

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format='%(levelname)s: %(message)s'
    )
    logger.debug(f"Using vault {config.get_vault_path()} ({config.output_folder_path})")

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except (BfavError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
