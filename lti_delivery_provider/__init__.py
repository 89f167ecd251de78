"""
Runtime will load the LTI delivery provider app from here.
"""
__version__ = '1.0.0'
