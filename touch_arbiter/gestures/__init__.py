"""
Gesture classification of the active touch set.
"""

from .classifier import Classification, GestureClassifier, classify

__all__ = [
    'Classification',
    'GestureClassifier',
    'classify'
]
