"""
Core matching engine modules for stablematch.

Submodules:
- expressions: Arithmetic evaluator and fitness token expansion
- matching: Data, preferences, decoders and the problem contract
- solver: Reference search drivers and benchmarking
"""
