import sys

from av1sweep.cli import main

sys.exit(main())
