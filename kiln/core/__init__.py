"""
Core infrastructure for kiln.

Exceptions, interfaces, models, settings and the service container shared
by the build engine and the CLI.
"""
