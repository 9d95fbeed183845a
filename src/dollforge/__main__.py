"""Allow ``python -m dollforge``."""

from dollforge.cli import main

if __name__ == "__main__":
    main()
