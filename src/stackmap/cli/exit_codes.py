"""Process exit codes for the stackmap CLI."""

EXIT_SUCCESS = 0
EXIT_SCAN_ERROR = 2
EXIT_INVALID_USAGE = 3
