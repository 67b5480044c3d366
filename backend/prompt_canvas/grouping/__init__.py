"""
Containment and attachment rules applied when nodes are dropped.
"""
