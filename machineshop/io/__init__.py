"""I/O utilities.

Subpackages
-----------
- :mod:`machineshop.io.artifacts`: persistence for trained models
"""
