"""Registry of organ modules.

Each organ contributes a state model, its write-time normalizers and a pure
``derive`` function. New organs are added by registering another entry.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import BaseModel

from radclean.brain import report as brain_report
from radclean.brain.state import NORMALIZERS as BRAIN_NORMALIZERS, BrainState
from radclean.config import Settings
from radclean.errors import UnknownModuleError
from radclean.models import DerivedResult
from radclean.pancreas import report as pancreas_report
from radclean.pancreas.state import PancreasState
from radclean.store import FindingStore, Normalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrganModule:
    module_id: str
    title: str
    state_cls: type[BaseModel]
    derive: Callable[..., DerivedResult]
    normalizers: tuple[Normalizer, ...] = field(default_factory=tuple)

    def new_store(self) -> FindingStore:
        return FindingStore(self.state_cls, self.normalizers)


_REGISTRY: dict[str, OrganModule] = {
    "brain": OrganModule(
        module_id="brain",
        title="Brain",
        state_cls=BrainState,
        derive=brain_report.derive,
        normalizers=BRAIN_NORMALIZERS,
    ),
    "pancreas": OrganModule(
        module_id="pancreas",
        title="Pancreas",
        state_cls=PancreasState,
        derive=pancreas_report.derive,
    ),
}


def get_module(module_id: str) -> OrganModule:
    module = _REGISTRY.get(module_id.strip().lower())
    if module is None:
        raise UnknownModuleError(module_id, available=sorted(_REGISTRY))
    return module


def list_modules() -> list[OrganModule]:
    return list(_REGISTRY.values())


def derive(module_id: str, state: BaseModel | None = None, settings: Settings | None = None) -> DerivedResult:
    """Derive a result for ``state`` (or the module defaults) of the given organ."""
    module = get_module(module_id)
    if state is None:
        state = module.state_cls()
    elif not isinstance(state, module.state_cls):
        raise TypeError(f"{module_id} expects {module.state_cls.__name__}, got {type(state).__name__}")
    logger.debug("Deriving %s", module_id)
    return module.derive(state, settings)
