"""Business operations on folders, files and storage quota."""
