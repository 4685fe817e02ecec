"""Supported frontend frameworks and their static metadata."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class FrameworkInfo:
    """Per-framework data consumed by the materializer and the env writer.

    Attributes:
        display: Human-readable name shown in prompts.
        env_prefix: Prefix the framework requires for client-exposed
            environment variables.
        raw_exceptions: Paths (relative to the raw template) that the
            framework's starter already supplies and that must not be copied.
        env_accessor: ``str.format`` pattern producing the source-code
            expression that reads a variable.
    """

    display: str
    env_prefix: str
    raw_exceptions: tuple[str, ...] = ()
    env_accessor: str = "{name}"


class Framework(str, Enum):
    """Frontend frameworks a template can be materialized for."""

    VITE = "vite"
    NEXTJS = "nextjs"

    @property
    def info(self) -> FrameworkInfo:
        return FRAMEWORKS[self]

    @property
    def template_dir_name(self) -> str:
        """Name of this framework's folder inside a template layer."""
        return f"template-{self.value}"

    @classmethod
    def parse(cls, value: str) -> "Framework":
        """Look up a framework by id, raising ``ValueError`` with the choices."""
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValueError(f"Unknown framework '{value}'. Choose one of: {choices}") from None


FRAMEWORKS: dict[Framework, FrameworkInfo] = {
    Framework.VITE: FrameworkInfo(
        display="Vite (React)",
        env_prefix="VITE_",
        raw_exceptions=(
            "src/App.tsx",
            "src/assets/react.svg",
            "public/vite.svg",
        ),
        env_accessor="import.meta.env.VITE_{name}",
    ),
    Framework.NEXTJS: FrameworkInfo(
        display="Next.js",
        env_prefix="NEXT_PUBLIC_",
        env_accessor="process.env.NEXT_PUBLIC_{name}!",
    ),
}
