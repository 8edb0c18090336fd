import sys

from pyforbid.cli import main

sys.exit(main())
