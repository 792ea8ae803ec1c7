import sys

from yagami.cli import main

sys.exit(main())
