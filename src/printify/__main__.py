"""Allow running as: python -m printify"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
