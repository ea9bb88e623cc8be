"""
Rotation reassignment engine

Cut, copy and paste of scheduled flights between aircraft on a planning
timeline:
1. Classifying a selection against the rotations it touches
2. Atomic move, split-and-move and copy with a short-lived undo
3. Validating flight swaps between two aircraft rows
"""

__version__ = "0.1.0"
