import sys

from mailbridge.main import main

sys.exit(main())
