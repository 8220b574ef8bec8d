import sys

from rshrelay.cli import main

sys.exit(main())
