import sys

from memvfs.cli import main

sys.exit(main())
