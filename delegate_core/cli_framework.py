"""CLI application framework for the delegate assistant.

Provides a declarative way to build the CLI with:
- Command registration via decorators
- Command groups (``mail``, ``calendar``, ``token``)
- Consistent error handling and exit codes
- Output formatting and logging setup
- Common arguments (--config-dir, --verbose, --quiet, --output)
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .applog import AppLogger
from .cli_errors import CLIError, ExitCode, handle_error
from .cli_output import OutputConfig, OutputFormat, OutputWriter


CommandFunc = Callable[[argparse.Namespace], int]
SessionLogFactory = Callable[[argparse.Namespace], Optional[AppLogger]]

REDACTED = "***"


def _loggable_argv(argv: Sequence[str], keep: Sequence[str]) -> List[str]:
    """Keep flags and command names; positional values may hold message text."""
    return [tok if tok.startswith("-") or tok in keep else REDACTED for tok in argv]


@dataclass
class Argument:
    """Definition of a CLI argument."""
    name_or_flags: tuple
    kwargs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandDef:
    """Definition of a CLI command."""
    name: str
    func: CommandFunc
    help: str = ""
    description: str = ""
    arguments: List[Argument] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)
    parent: Optional[str] = None  # For nested commands like "mail inbox"


class CLIApp:
    """Base class for CLI applications.

    Example usage:
        app = CLIApp("outlook-delegate", "Delegate mailbox CLI")
        mail = app.group("mail", help="Mail commands")

        @mail.command("inbox", help="List latest emails")
        @mail.argument("count", nargs="?", type=int, default=10)
        def cmd_inbox(args):
            ...
            return 0
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        version: Optional[str] = None,
        epilog: Optional[str] = None,
        session_log: Optional[SessionLogFactory] = None,
    ):
        self.name = name
        self.description = description
        self.version = version
        self.epilog = epilog
        self.session_log = session_log

        self._groups: Dict[str, "CommandGroup"] = {}
        self._parser: Optional[argparse.ArgumentParser] = None
        self._pending_arguments: List[Argument] = []

    def argument(self, *name_or_flags: str, **kwargs: Any) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to add an argument to the next command.

        Must be used BELOW the @command decorator (decorators apply bottom-up).
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            self._pending_arguments.append(Argument(name_or_flags, kwargs))
            return func
        return decorator

    def group(self, name: str, *, help: str = "", description: str = "") -> "CommandGroup":
        """Create a command group for nested commands."""
        group = CommandGroup(self, name, help=help, description=description)
        self._groups[name] = group
        return group

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=self.name,
            description=self.description,
            epilog=self.epilog,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        if self.version:
            parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {self.version}")
        self._add_common_arguments(parser)

        if self._groups:
            subparsers = parser.add_subparsers(dest="command", metavar="<command>")
            for group_name, group in self._groups.items():
                group_parser = subparsers.add_parser(
                    group_name,
                    help=group.help,
                    description=group.description,
                )
                group_parser.set_defaults(_group_parser=group_parser)
                group._build_subparsers(group_parser)

        self._parser = parser
        return parser

    def _add_common_arguments(self, parser: argparse.ArgumentParser, suppress: bool = False) -> None:
        """Add common arguments.

        Leaf parsers get SUPPRESS defaults so flags given before the
        subcommand are not overwritten by the subparser's defaults.
        """
        def default(value: Any) -> Any:
            return argparse.SUPPRESS if suppress else value

        parser.add_argument(
            "--config-dir",
            default=default(None),
            help="Directory holding config.json and credentials.json (default: ~/.outlook-mcp)",
        )
        parser.add_argument("--verbose", "-v", action="store_true", default=default(False),
                            help="Enable verbose output and debug logging")
        parser.add_argument("--quiet", "-q", action="store_true", default=default(False),
                            help="Suppress non-essential output")
        parser.add_argument(
            "--output", "-o",
            choices=[f.value for f in OutputFormat],
            default=default(OutputFormat.TEXT.value),
            help="Output format (default: text)",
        )

    def _add_command_arguments(self, parser: argparse.ArgumentParser, cmd_def: CommandDef) -> None:
        self._add_common_arguments(parser, suppress=True)
        for arg in cmd_def.arguments:
            parser.add_argument(*arg.name_or_flags, **arg.kwargs)

    @staticmethod
    def _configure_logging(verbose: bool) -> None:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            stream=sys.stderr,
        )

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Parse ``argv``, dispatch to the command, and return an exit code."""
        parser = self._parser or self.build_parser()
        args = parser.parse_args(argv)

        verbose = bool(getattr(args, "verbose", False))
        self._configure_logging(verbose)
        args._output = OutputWriter(OutputConfig(
            format=OutputFormat(getattr(args, "output", OutputFormat.TEXT.value)),
            verbose=verbose,
            quiet=bool(getattr(args, "quiet", False)),
        ))

        cmd_func = getattr(args, "_cmd_func", None)
        if cmd_func is None:
            (getattr(args, "_group_parser", None) or parser).print_help()
            return ExitCode.USAGE

        applog = self.session_log(args) if self.session_log else None
        cmd_name = " ".join(p for p in (getattr(args, "command", None), getattr(args, "subcommand", None)) if p)
        raw_argv = list(argv) if argv is not None else sys.argv[1:]
        sid = applog.start(cmd_name, _loggable_argv(raw_argv, cmd_name.split())) if applog else None
        started = time.time()
        status, error_text = "ok", None
        try:
            return int(cmd_func(args))
        except CLIError as e:
            status, error_text = "error", f"{e.kind}: {e.message}"
            if applog and sid:
                applog.error(sid, e.message, e.to_dict())
            return handle_error(e, verbose=verbose)
        except KeyboardInterrupt as e:
            status = "interrupted"
            return handle_error(e, verbose=verbose)
        except Exception as e:
            status, error_text = "error", repr(e)
            return handle_error(e, verbose=verbose)
        finally:
            if applog and sid:
                applog.end(sid, status=status, duration_ms=int((time.time() - started) * 1000), error=error_text)


class CommandGroup:
    """A group of related commands (e.g., "mail" containing "inbox", "read", ...)."""

    def __init__(self, app: CLIApp, name: str, *, help: str = "", description: str = ""):
        self.app = app
        self.name = name
        self.help = help
        self.description = description or help
        self._commands: Dict[str, CommandDef] = {}

    def command(
        self,
        name: str,
        *,
        help: str = "",
        description: str = "",
        aliases: Optional[List[str]] = None,
    ) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to register a command in this group."""
        def decorator(func: CommandFunc) -> CommandFunc:
            arguments = list(reversed(self.app._pending_arguments))
            self.app._pending_arguments.clear()
            cmd_def = CommandDef(
                name=name,
                func=func,
                help=help,
                description=description or help,
                arguments=arguments,
                aliases=aliases or [],
                parent=self.name,
            )
            self._commands[name] = cmd_def
            return func
        return decorator

    def argument(self, *name_or_flags: str, **kwargs: Any) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to add an argument. Delegates to app."""
        return self.app.argument(*name_or_flags, **kwargs)

    def _build_subparsers(self, parser: argparse.ArgumentParser) -> None:
        self.app._add_common_arguments(parser, suppress=True)
        subparsers = parser.add_subparsers(dest="subcommand", metavar="<subcommand>")
        for cmd_name, cmd_def in self._commands.items():
            cmd_parser = subparsers.add_parser(
                cmd_name,
                help=cmd_def.help,
                description=cmd_def.description,
                aliases=cmd_def.aliases,
            )
            self.app._add_command_arguments(cmd_parser, cmd_def)
            cmd_parser.set_defaults(_cmd_func=cmd_def.func)
