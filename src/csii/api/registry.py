from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, cast

from importlib import metadata as importlib_metadata

from csii.api.base_controller import Controller, ModuleProfile
from csii.core.controller import ARXController
from csii.core.policy import DosingPolicy

ENTRY_POINT_GROUP = "csii.controllers"

BUILTIN_CONTROLLERS: Dict[str, Callable[..., Controller]] = {
    "csii-iob": lambda **kwargs: ARXController(policy=DosingPolicy.IOB, **kwargs),
    "csii-threshold": lambda **kwargs: ARXController(policy=DosingPolicy.THRESHOLD, **kwargs),
}


@dataclass
class ControllerListing:
    name: str
    source: str
    profile: Optional[ModuleProfile]
    status: str = "available"
    error: Optional[str] = None


def create_controller(name: str, **kwargs: Any) -> Controller:
    """Instantiate a built-in controller by registry name."""
    try:
        factory = BUILTIN_CONTROLLERS[name]
    except KeyError:
        valid = ", ".join(sorted(BUILTIN_CONTROLLERS))
        raise ValueError(f"Unknown controller '{name}'. Expected one of: {valid}.") from None
    return factory(**kwargs)


def _load_entry_point(ep) -> ControllerListing:
    try:
        obj = ep.load()
        if isinstance(obj, type) and issubclass(obj, Controller):
            return ControllerListing(
                name=ep.name,
                source=f"entry_point:{ep.name}",
                profile=obj().get_model_info(),
            )
        return ControllerListing(
            name=ep.name,
            source=f"entry_point:{ep.name}",
            profile=None,
            status="invalid",
            error="Entry point does not resolve to a Controller",
        )
    except Exception as exc:
        return ControllerListing(
            name=ep.name,
            source=f"entry_point:{ep.name}",
            profile=None,
            status="unavailable",
            error=str(exc),
        )


def list_controllers() -> List[ControllerListing]:
    listings: List[ControllerListing] = [
        ControllerListing(name=name, source="builtin", profile=factory().get_model_info())
        for name, factory in BUILTIN_CONTROLLERS.items()
    ]

    eps = importlib_metadata.entry_points()
    if hasattr(eps, "select"):
        group = eps.select(group=ENTRY_POINT_GROUP)
    else:
        eps_mapping = cast(Mapping[str, Sequence[object]], eps)
        group = eps_mapping.get(ENTRY_POINT_GROUP, ())
    for ep in group:
        listings.append(_load_entry_point(ep))

    return listings
