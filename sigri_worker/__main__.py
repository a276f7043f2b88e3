import sys

from sigri_worker.main import main

sys.exit(main())
