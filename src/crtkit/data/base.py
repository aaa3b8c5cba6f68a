"""Module with a parent class of all data structures."""

from dataclasses import dataclass

import numpy as np


@dataclass(eq=False)
class DataBase:
    """Base class of all data structures.

    Defines basic methods shared by all data structures.
    """

    # Fixed-length attributes as (key, size) or (key, (size, dtype)) pairs
    _fixed_length_attrs = ()

    # Variable-length attributes as (key, dtype) or (key, (width, dtype)) pairs
    _var_length_attrs = ()

    # String attributes
    _str_attrs = ()

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Provides two functions:
        - Gives default values to array-like attributes. If a default value was
          provided in the attribute definition, all instances of this class
          would point to the same memory location.
        - Casts array-like attributes provided as lists to numpy arrays and
          strings provided as binary objects to regular strings.
        """
        # Provide default values to the variable-length array attributes
        for attr, dtype in self._var_length_attrs:
            if not isinstance(dtype, tuple):
                width, dtype = None, dtype
            else:
                width, dtype = dtype
            value = getattr(self, attr)
            if value is None:
                shape = (0,) if width is None else (0, width)
                setattr(self, attr, np.empty(shape, dtype=dtype))
            else:
                setattr(self, attr, np.asarray(value, dtype=dtype))

        # Provide default values to the fixed-length array attributes
        for attr, size in self._fixed_length_attrs:
            if not isinstance(size, tuple):
                dtype = np.float64
            else:
                size, dtype = size
            value = getattr(self, attr)
            if value is None:
                setattr(self, attr, np.full(size, -np.inf, dtype=dtype))
            else:
                value = np.asarray(value, dtype=dtype)
                assert value.shape == (size,), (
                    f"The `{attr}` attribute must be of length {size}, "
                    f"got shape {value.shape}."
                )
                setattr(self, attr, value)

        # Cast stored binary strings back to regular strings
        for attr in self._str_attrs:
            if isinstance(getattr(self, attr), bytes):
                setattr(self, attr, getattr(self, attr).decode())

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        This overloads the default dataclass `__eq__` method to include an
        appopriate check for vector (numpy) attributes.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        # Check that the two objects belong to the same class
        if self.__class__ != other.__class__:
            return False

        # Check that all base attributes are identical
        for k, v in self.__dict__.items():
            v_other = getattr(other, k)
            if isinstance(v, np.ndarray):
                # For vectors, compare all elements
                if v.shape != v_other.shape or (v_other != v).any():
                    return False

            elif v != v_other:
                return False

        return True
