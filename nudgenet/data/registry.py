"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, MutableMapping

from .batches import TrainingBatch


@dataclass(frozen=True)
class DatasetSpec:
    """A named, fully materialised dataset.

    Attributes
    ----------
    name:
        Registry key the dataset was built from.
    batch:
        Every example of the dataset, in generation order.
    n_inputs:
        Width the network's input layer must have.
    n_outputs:
        Width the network's output layer must have.
    provenance:
        Options the factory was called with, recorded in run manifests.
    """

    name: str
    batch: TrainingBatch
    n_inputs: int
    n_outputs: int
    provenance: Dict[str, Any] = field(default_factory=dict)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | None:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset`` built with ``options``."""

    try:
        factory = _REGISTRY[dataset]
    except KeyError as exc:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}") from exc
    return factory(**options)


def available_datasets() -> List[str]:
    return sorted(_REGISTRY)


__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "register_dataset"]
