import sys

from mintgate.cli import main

sys.exit(main())
