"""Allow ``python -m hs_cli``."""

from hs_cli.cli import main

main()
