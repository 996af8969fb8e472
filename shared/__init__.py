"""
rvelf Shared Module
====================

Configuration, logging, and console utilities shared by the rvelf
decoding core and its command line front-end.
"""

from shared.config import RvelfConfig, get_config

__all__ = ["RvelfConfig", "get_config"]
