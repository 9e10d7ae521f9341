'''
Abstract base classes for dimred.

ModelResult is the frozen base of every result object returned by the package,
and ModelBase fixes the fit / results / summary contract that the PCA model
follows.
'''

import abc
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, cast

import numpy as np

from dimred.core.exceptions import raise_not_fitted_error
from dimred.core.types import D, R


def readonly(array: np.ndarray) -> np.ndarray:
    """Return a private, write-protected copy of an array."""
    copy = np.array(array, copy=True)
    copy.setflags(write=False)
    return copy


@dataclass(frozen=True)
class ModelResult:
    """Base class for all result objects.

    Results are immutable: subclasses store read-only arrays and offer
    methods that return new objects instead of mutating in place.
    """

    model_name: str

    def summary(self) -> str:
        header = f"Model: {self.model_name}\n"
        return header + "=" * (len(header) - 1) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result object to a dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of the result object.
        """
        return {"model_name": self.model_name}


class ModelBase(abc.ABC, Generic[R, D]):
    """Abstract base class for all models in dimred.

    Type Parameters:
        R: The result type for this model
        D: The data type this model accepts
    """

    def __init__(self, name: str = "Model"):
        self._name = name
        self._fitted = False
        self._results: Optional[R] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def fitted(self) -> bool:
        return self._fitted

    @property
    def results(self) -> R:
        """Get the model results.

        Raises:
            NotFittedError: If the model has not been fitted
        """
        self._check_fitted("results")
        return cast(R, self._results)

    def _check_fitted(self, operation: str) -> None:
        if not self._fitted or self._results is None:
            raise_not_fitted_error(
                f"{self._name} has not been fitted. Call fit() first.",
                model_type=self.__class__.__name__,
                operation=operation
            )

    @abc.abstractmethod
    def fit(self, data: D, **kwargs: Any) -> R:
        """Fit the model to the provided data.

        Args:
            data: The data to fit the model to
            **kwargs: Additional keyword arguments for model fitting

        Returns:
            R: The model results
        """

    def summary(self) -> str:
        """Generate a text summary of the model."""
        if not self._fitted or self._results is None:
            return f"Model: {self._name} (not fitted)"
        return cast(Any, self._results).summary()

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self._name}', fitted={self._fitted})"
