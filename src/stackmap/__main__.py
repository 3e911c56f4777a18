"""Allow ``python -m stackmap``."""

from stackmap.cli import main

raise SystemExit(main())
