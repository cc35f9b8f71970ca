"""Entry point: python -m imagecompare"""

import sys

from imagecompare.cli import main

sys.exit(main())
