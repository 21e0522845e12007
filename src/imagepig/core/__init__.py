"""
Core modules for imagepig.

This package contains the core client logic for:
- Client configuration
- Model endpoints and request building
- Input image handling
- Generation results
"""
