"""Allow ``python -m playtest_agent``."""

from playtest_agent.cli import main

main()
