"""
netprobe - Network Diagnostics Probing Engine

Entry point for running as a module:
    python -m netprobe <command> <args...>
"""

from .cli import main

if __name__ == '__main__':
    main()
