from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

# typing only
FloatArray: TypeAlias = NDArray[np.floating]
ScalarFn: TypeAlias = Callable[[float], float]

# Runtime types
FloatDType = np.float64  # runtime dtype only
