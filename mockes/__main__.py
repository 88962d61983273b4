import sys

from mockes.cli import main

sys.exit(main())
