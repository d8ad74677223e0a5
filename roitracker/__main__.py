import sys

from roitracker.main import main

sys.exit(main())
