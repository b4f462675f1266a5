import sys

from gridcity.cli import main

sys.exit(main())
