"""
Core infrastructure layer for StarSync.

Configuration, logging, the async database engine and infrastructure
exceptions. No business rules and no Discord behavior live here; feature
modules import from the submodules directly.
"""
