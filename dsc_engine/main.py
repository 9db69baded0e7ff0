#!/usr/bin/env python3
"""
DSC Engine
Entry point for ``python -m dsc_engine.main``
"""
from .cli import main

if __name__ == "__main__":
    main()
