import sys

from assettrack.cli import main

sys.exit(main())
