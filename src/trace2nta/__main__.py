import sys

from trace2nta.cli import main

sys.exit(main())
