import sys

from exportbutton.cli.main import main

sys.exit(main())
