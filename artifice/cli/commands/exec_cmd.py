from __future__ import annotations

from ...tools.shell import DEFAULT_TIMEOUT, run_sandboxed


def add_exec(subparsers):
    parser = subparsers.add_parser("exec", help="Execute shell command in the tool sandbox")
    parser.add_argument("command", help="Shell command to run")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Seconds before the command is killed")
    parser.set_defaults(func=run_exec)


def run_exec(args, settings) -> int:
    try:
        run = run_sandboxed(args.command, timeout=args.timeout)
    except OSError as exc:
        print(f"exec failed: {exc}")
        return 1

    print(f"exit={run.exit_code}")
    if run.timed_out:
        print(f"timed out after {args.timeout}s")
    elif run.truncated:
        print("output truncated")
    if run.output:
        print("output:")
        print(run.text)
    return 0
