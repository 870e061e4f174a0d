import sys

from hostinfo.main import main

sys.exit(main())
