"""Generation options."""

from dataclasses import dataclass
from enum import StrEnum, auto

from .naming import MANGLERS, RuntimeConvention


class Profile(StrEnum):
    """Output profile: plain code, or code with annotations and declarations."""

    BARE = auto()
    TYPED = auto()


@dataclass(frozen=True)
class GeneratorOptions:
    profile: Profile = Profile.BARE
    domain_module: str | None = None  # detected from the catalog when None
    app_core_module: str = "AppCore"
    action_type: str = "Action"
    model_type: str = "Model"
    runtime_alias: str = "_rt"
    mangle: str = "dafny"
    runtime_import: str | None = None
    modules_import: str | None = None

    @property
    def typed(self) -> bool:
        return self.profile == Profile.TYPED

    def convention(self) -> RuntimeConvention:
        try:
            return RuntimeConvention(mangle=MANGLERS[self.mangle])
        except KeyError:
            raise ValueError(
                f"Unknown name mangling '{self.mangle}', expected one of: {', '.join(MANGLERS)}"
            ) from None
