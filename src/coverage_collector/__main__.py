import sys

from coverage_collector.cli import main

sys.exit(main())
