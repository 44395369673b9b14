import sys

from fractional_stv.cli import main

if __name__ == "__main__":
    sys.exit(main())
