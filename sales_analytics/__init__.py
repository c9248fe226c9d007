"""
Walmart sales analytics: clean the raw sales extract, load it into a
relational store and run the reporting query catalog against it.
"""

__version__ = "0.1.0"
