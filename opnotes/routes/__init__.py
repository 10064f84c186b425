"""
Routes package for the OpNotes application.

This package contains route blueprints for different sections of the application:
- print_templates: Print template management, live preview and printing
"""
