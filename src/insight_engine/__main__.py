import sys

from insight_engine.cli import main

sys.exit(main())
