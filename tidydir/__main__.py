import sys

from tidydir.cli import main

sys.exit(main())
