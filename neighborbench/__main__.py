import sys

from neighborbench.cli import main

sys.exit(main())
