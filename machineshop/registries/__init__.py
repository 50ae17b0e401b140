"""Key -> factory registries.

Builtins are registered lazily on first lookup so importing a registry never
pulls in heavy component modules.
"""
