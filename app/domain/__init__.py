"""
Lease domain - value objects and errors shared by the engine modules.
"""
