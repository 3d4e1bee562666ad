import sys

from jobsift.cli import main

sys.exit(main())
