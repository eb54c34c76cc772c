"""
AutoMod - Utils Package
=======================

Stateless helpers usable anywhere in the codebase.

Available Utilities:
    async_utils: Error-logging wrappers for coroutines and background tasks
    duration: Compact duration formatting ("1d", "3h", "15m")
"""
