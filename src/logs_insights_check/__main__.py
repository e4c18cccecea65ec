"""Module entrypoint.

Allows:
    python -m logs_insights_check --log-group-name /app -f 'filter @message like /ERROR/'
"""

from __future__ import annotations

from logs_insights_check.cli import main

if __name__ == "__main__":
    main()
