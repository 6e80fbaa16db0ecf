"""
Named multi-dimensional variables.

A Variable couples a numpy buffer with the kind of each of its dimensions
(time, vertical, ...) and an optional unit string. The buffer shape is the
list of dimension extents, so the element count always equals the product of
the extents.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from vprofile.exceptions import InvalidArgumentError
from vprofile.product.units import convert_unit


class DimensionType(Enum):
    """Kinds of dimensions a variable can have."""
    TIME = "time"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    VERTICAL = "vertical"
    SPECTRAL = "spectral"
    INDEPENDENT = "independent"


class DataType(Enum):
    """Element types of variable buffers."""
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"

    @property
    def numpy_dtype(self) -> np.dtype:
        """Numpy dtype used to store elements of this type."""
        return _NUMPY_DTYPES[self]

    @classmethod
    def from_numpy(cls, dtype) -> "DataType":
        """Map a numpy dtype onto a DataType."""
        dtype = np.dtype(dtype)
        if dtype.kind in ("U", "S", "O"):
            return cls.STRING
        for data_type, numpy_dtype in _NUMPY_DTYPES.items():
            if numpy_dtype == dtype:
                return data_type
        raise InvalidArgumentError(f"unsupported data type '{dtype}'")


_NUMPY_DTYPES = {
    DataType.INT8: np.dtype(np.int8),
    DataType.INT16: np.dtype(np.int16),
    DataType.INT32: np.dtype(np.int32),
    DataType.FLOAT: np.dtype(np.float32),
    DataType.DOUBLE: np.dtype(np.float64),
    DataType.STRING: np.dtype(object),
}


@dataclass
class Variable:
    """A named, typed, multi-dimensional variable.

    Attributes:
        name: Variable name (unique within a product)
        data: Numpy buffer; its shape gives the dimension extents
        dimension_type: Kind of each dimension, one per axis of `data`
        unit: Unit string (None for unitless/string data)
        description: Free text description
    """
    name: str
    data: np.ndarray
    dimension_type: Tuple[DimensionType, ...]
    unit: Optional[str] = None
    description: str = ""

    def __post_init__(self):
        """Validate dimensions against the buffer."""
        self.data = np.asarray(self.data)
        self.dimension_type = tuple(self.dimension_type)
        if len(self.dimension_type) != self.data.ndim:
            raise InvalidArgumentError(
                f"variable '{self.name}' has {self.data.ndim} dimensions but "
                f"{len(self.dimension_type)} dimension types"
            )
        DataType.from_numpy(self.data.dtype)

    @classmethod
    def new(
        cls,
        name: str,
        data_type: DataType,
        dimension_type: Sequence[DimensionType],
        dimension: Sequence[int],
        unit: Optional[str] = None,
    ) -> "Variable":
        """Create a variable with a zero-filled buffer of the given shape."""
        data = np.zeros(tuple(dimension), dtype=data_type.numpy_dtype)
        return cls(name, data, tuple(dimension_type), unit)

    @property
    def dimension(self) -> Tuple[int, ...]:
        """Extent of each dimension."""
        return self.data.shape

    @property
    def num_dimensions(self) -> int:
        return self.data.ndim

    @property
    def num_elements(self) -> int:
        return self.data.size

    @property
    def data_type(self) -> DataType:
        return DataType.from_numpy(self.data.dtype)

    def has_dimension_types(self, dimension_type: Sequence[DimensionType]) -> bool:
        """True if the variable has exactly the given dimension signature."""
        return self.dimension_type == tuple(dimension_type)

    def copy(self, name: Optional[str] = None) -> "Variable":
        """Deep copy, optionally under a new name."""
        return Variable(
            name=self.name if name is None else name,
            data=self.data.copy(),
            dimension_type=self.dimension_type,
            unit=self.unit,
            description=self.description,
        )

    def convert_data_type(self, data_type: DataType) -> None:
        """Convert the buffer to another element type in place."""
        if self.data_type is not data_type:
            self.data = self.data.astype(data_type.numpy_dtype)

    def convert_unit(self, unit: Optional[str]) -> None:
        """Convert the values to another unit in place."""
        if unit is None or unit == self.unit:
            return
        if self.data_type not in (DataType.FLOAT, DataType.DOUBLE):
            self.convert_data_type(DataType.DOUBLE)
        self.data = convert_unit(self.data, self.unit, unit)
        self.unit = unit
