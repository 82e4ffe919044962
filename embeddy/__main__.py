import sys

from embeddy.cli import main

sys.exit(main())
