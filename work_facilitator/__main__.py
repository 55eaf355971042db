import sys

from work_facilitator.cli.main import main

sys.exit(main())
