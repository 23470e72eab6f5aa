import sys

from dkim_prover.cli import main

sys.exit(main())
