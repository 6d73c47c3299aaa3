"""
Jukebox package __main__ entry point.

Allows running with: python -m jukebox
"""

from jukebox.app.run import main

if __name__ == "__main__":
    main()
