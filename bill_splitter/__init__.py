"""
Bill Splitter - Source Package

A small interactive bill-splitting calculator. Items, participants and
tax rates go in; each participant's share of the bill comes out.

DESIGN PRINCIPLES:
1. The allocation is a pure function of its input
2. Malformed input degrades to zero, never blocks the form
3. Every recomputation reflects the latest committed input
4. Every user action is logged
"""

__version__ = "1.0.0"
