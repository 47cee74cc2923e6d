"""
                Storefront

Backend core for a food-ordering storefront: the shopping cart, the
restaurant open/closed evaluator, and thin delivery-dispatch wrappers.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
