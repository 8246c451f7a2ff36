"""
dbctl
Manage a local PostgreSQL + pgAdmin compose project.
"""

from .dbctl import VERSION, cli, main

# Version information
__version__ = VERSION
