import sys

from dualcommit.cli.main import main

sys.exit(main())
