import sys

from eventcatalog_openapi.cli import main

sys.exit(main())
