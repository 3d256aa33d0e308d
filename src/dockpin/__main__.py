import sys

from dockpin.cli import main

sys.exit(main())
