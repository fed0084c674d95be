"""Command-line interface."""
from meshsubdivision.main import main

if __name__ == "__main__":
    raise SystemExit(main())
