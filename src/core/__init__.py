"""
AutoMod - Core Package
======================

Configuration and logging.

DESIGN:
    Core modules expose global instances so state is consistent across
    the application:
    - get_config() returns the same Config instance
    - logger is a global TreeLogger instance

    Import from the submodules directly (src.core.config, src.core.logger);
    config depends on the anti-spam constants, so nothing is re-exported here.
"""
