"""Punto de entrada ``python -m pump_codec``."""

from __future__ import annotations

from pump_codec.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
