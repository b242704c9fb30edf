import sys

from pathtrace.cli import main

sys.exit(main())
