"""Allow ``python -m codesentinel``."""

from codesentinel.cli.main import main

raise SystemExit(main())
