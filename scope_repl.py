import asyncio
import sys

from replscope.scope_config import load_config
from replscope.scope_datatypes import ConfigError
from replscope.scope_log import configure_from
from replscope.scope_printer import Printer
from replscope.scope_runtime import ReplSession
from replscope.scope_serialize import export_snapshot

# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)

async def read_snippet(session: ReplSession) -> str:
    """Read one snippet, prompting for continuation lines until it is complete."""
    raw = await ainput(">>> ")
    if raw == "":
        raise EOFError
    source = raw.rstrip("\n")
    if source.startswith(":") or source.strip() == "exit":
        return source.strip()
    while source.strip() and not session.compiler.is_complete(source + "\n"):
        more = await ainput("... ")
        if more == "":
            raise EOFError
        source += "\n" + more.rstrip("\n")
    return source

def run_command(session: ReplSession, printer: Printer, command: str):
    """Handle a ':' command; returns False for unknown commands."""
    name, _, arg = command[1:].partition(" ")
    arg = arg.strip()
    if name == "vars":
        print(printer.pformat(session.variables))
    elif name == "funcs":
        print(printer.pformat(session.functions))
    elif name == "context":
        if session.last_report is not None:
            print(printer.pformat(session.last_report))
    elif name == "export":
        path = arg or f"context.{session.config.export_format}"
        fmt = None if arg else session.config.export_format
        try:
            used = export_snapshot(path, session.variables, session.functions, fmt=fmt)
        except (OSError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
        else:
            print(f"Exported {used} snapshot to {path}")
    elif name == "reset":
        session.reset()
        print("Session reset.")
    else:
        return False
    return True

async def main():
    """Start the interactive REPL; an optional argument names a YAML config file."""
    config_path = None
    if len(sys.argv) > 1 and not sys.argv[1].startswith("-"):
        config_path = sys.argv[1]
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    configure_from(config)

    print("replscope REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit; ':vars', ':funcs', ':context', ':export [PATH]', ':reset'.")

    # Setup
    session = ReplSession(config)
    printer = Printer()

    # REPL Loop
    while True:
        try:
            line = await read_snippet(session)

            if not line.strip():
                continue
            if line == "exit":
                break
            if line.startswith(":"):
                if not run_command(session, printer, line):
                    print(f"Unknown command: {line}", file=sys.stderr)
                continue

            result = await session.handle_line(line)

            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            # Print final result
            if result.value is not None:
                print(repr(result.value))

        except EOFError:
            print("\nExiting.")
            break
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)

def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")

if __name__ == "__main__":
    run()
