"""Allow ``python -m profagent``."""

from profagent.cli import main

if __name__ == "__main__":
    main()
