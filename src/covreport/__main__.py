"""Allow ``python -m covreport``."""

from covreport.cli import main

if __name__ == "__main__":
    main()
