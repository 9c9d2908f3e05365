"""
domain - Core types, exceptions and ports.

No dependencies on agent/, application/ or infrastructure/.
"""
