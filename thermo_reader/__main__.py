"""Allow ``python -m thermo_reader`` to launch the controller."""

from __future__ import annotations

import sys


def main() -> None:
    from thermo_reader import run
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
