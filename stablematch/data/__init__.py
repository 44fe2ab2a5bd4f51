"""
Data layer for stablematch.

Submodules:
- models: Pydantic problem definition documents
- sample: Random sample problem generation
"""
