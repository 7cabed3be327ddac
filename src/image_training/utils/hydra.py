"""Hydra ConfigStore registration utilities."""

from __future__ import annotations

from typing import Any

from hydra.core.config_store import ConfigStore
from loguru import logger


def register(
    target: Any = None,
    *,
    group: str | None = None,
    name: str | None = None,
    **defaults: Any,
) -> Any:
    """Decorator registering a class or factory function in Hydra's ConfigStore.

    The stored node is ``{"_target_": "<module>.<qualname>", **defaults}``, so
    ``hydra.utils.instantiate`` can build the target from a composed config.

    If *group* is not provided it is inferred from the module path: the
    second-to-last element, e.g. ``image_training.models.twin`` -> ``models``.

    Arguments:
        target: The class or function to register.
        group: The ConfigStore group. If ``None``, inference is attempted.
        name: The name for the config. Defaults to the target's name.
        **defaults: Default values for the configuration node.
    """

    def _process(obj: Any) -> Any:
        target_path = f"{obj.__module__}.{obj.__qualname__}"
        config_name = name or obj.__name__
        config_group = group or obj.__module__.split(".")[-2]

        logger.debug(
            f"Registering {obj.__name__} as '{config_name}' in group '{config_group}'"
        )
        node = {"_target_": target_path, **defaults}
        ConfigStore.instance().store(group=config_group, name=config_name, node=node)
        return obj

    if target is None:
        return _process
    return _process(target)
