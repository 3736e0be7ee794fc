import sys

from seedfuzz.cli import main

sys.exit(main())
