import sys

from link_scribe.cli import main

sys.exit(main())
