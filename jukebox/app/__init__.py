"""
Application module for Marker Jukebox.

Contains the engine, the read-only HTTP state server and the entry point.
"""
