"""
Tools package initialization
"""

from .utils import Logger, mask_secret, strip_code_fences

__all__ = ['Logger', 'mask_secret', 'strip_code_fences']
