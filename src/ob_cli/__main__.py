"""Allow ``python -m ob_cli``."""

from ob_cli import main

main()
