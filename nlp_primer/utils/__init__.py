"""
Shared utility functions.

This subpackage includes:
- run configuration loading
- output directory management
- lightweight logging helpers used by the pipeline and scripts.
"""
