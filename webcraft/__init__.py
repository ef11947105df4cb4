"""
Webcraft - conversational website builder
"""

__version__ = '1.0.0'
