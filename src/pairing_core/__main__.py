from __future__ import annotations

from pairing_core.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
