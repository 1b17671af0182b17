"""Rule Documentation Browser - metadata service and rule-tree rendering core.

The service only serves rule metadata computed elsewhere; the rendering core
turns rule documents into ordered, formatted documentation trees.
"""

__version__ = "0.1.0"
