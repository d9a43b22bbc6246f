"""Module entry point for `python -m tracksaver.cli`."""
import sys

if __name__ == "__main__":  # pragma: no cover (invocation driven)
    # Track names routinely carry non-ASCII characters
    if sys.platform == "win32" and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    from tracksaver.cli import cli

    cli()
