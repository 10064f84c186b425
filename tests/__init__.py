"""
Test package for the OpNotes application.

This package contains tests for the various components of the application:
- test_blocks.py: Tests for the block model, palette and default templates
- test_expressions.py: Tests for field paths, conditions and formatting
- test_renderer.py: Tests for the HTML renderer
- test_context.py: Tests for template context construction
- test_print_template_repository.py: Tests for print template persistence
- test_print_template_routes.py: Tests for the print template HTTP routes
"""
