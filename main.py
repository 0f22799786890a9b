#!/usr/bin/env python3

import sys

from benchrun.cli import main as cli_main
from benchrun.config import resolve_config_path


def main(argv=None) -> int:
    """Run the bench runner, picking up ``config.yaml`` when present.

    An explicit ``--config`` on the command line takes precedence.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if "--config" not in argv and not any(a.startswith("--config=") for a in argv):
        config_file = resolve_config_path(None)
        if config_file is not None:
            argv = ["--config", config_file] + argv
    return cli_main(argv)


if __name__ == "__main__":
    sys.exit(main())
