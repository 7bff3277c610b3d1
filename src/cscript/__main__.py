import sys

from cscript.cli import main


sys.exit(main())
