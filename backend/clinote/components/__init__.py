"""Core Business Components.

This package contains independent business modules:
- workspace: Folder, Note, Tab entities, the store and the file sync
- templates: Template catalog, generators and the generation coordinator
"""
