from __future__ import annotations

import sys

try:
    from .cli import main as _cli_main
except ImportError:
    from tempmon_app.cli import main as _cli_main


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    return int(_cli_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
