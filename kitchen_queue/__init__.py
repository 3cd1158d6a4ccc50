"""
                Kitchen Order Queue

Live order queue engine for the kitchen / front-of-house display:
wait estimates, today's queue, and automatic ready -> delivered
advancement after a grace period.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
