"""
Tools built on the core synchronization functionality: configuration and
command-line interface.
"""
