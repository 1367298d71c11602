"""Allow running biceplab as ``python -m biceplab``."""

from biceplab.cli import main

if __name__ == "__main__":
    main()
