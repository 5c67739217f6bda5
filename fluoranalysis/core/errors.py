"""Exceptions raised by fluoranalysis.

Every exception here is raised before any computation starts. Degenerate
statistical cases (constant neighborhoods, all-zero weights) are not errors
and surface as 0.0 or NaN values instead.
"""

from typing import Sequence


class FluorAnalysisError(Exception):
    """Base class for all fluoranalysis errors."""


class MismatchedArrayLengthsError(FluorAnalysisError, ValueError):
    """Two sequences that must correspond element-wise differ in length."""

    def __init__(self, a_name: str, a_len: int, b_name: str, b_len: int):
        self.a_name = a_name
        self.a_len = a_len
        self.b_name = b_name
        self.b_len = b_len
        super().__init__(
            f'Mismatched array lengths, "{a_name}" of length {a_len} and '
            f'"{b_name}" of length {b_len} do not match.'
        )


class MismatchedArrayShapesError(FluorAnalysisError, ValueError):
    """Two arrays that must correspond element-wise differ in shape."""

    def __init__(self, a_name: str, a_shape: Sequence[int], b_name: str, b_shape: Sequence[int]):
        self.a_name = a_name
        self.a_shape = tuple(a_shape)
        self.b_name = b_name
        self.b_shape = tuple(b_shape)
        super().__init__(
            f'Mismatched array shapes, array "{a_name}" with shape {self.a_shape} and '
            f'array "{b_name}" with shape {self.b_shape} do not match.'
        )


class InvalidParameterError(FluorAnalysisError, ValueError):
    """A scalar or array argument is out of range or otherwise unusable."""

    def __init__(self, param_name: str, message: str):
        self.param_name = param_name
        super().__init__(f'Invalid parameter "{param_name}", {message}')
