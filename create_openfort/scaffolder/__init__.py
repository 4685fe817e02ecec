"""create-openfort scaffolder -- turns template layers into project files.

Quick usage::

    from create_openfort.scaffolder import Framework, TemplateMaterializer, fill_framework_env

    materializer = TemplateMaterializer(Path("templates"), product="openfortkit")
    materializer.materialize(Framework.VITE, workspace)
    fill_framework_env(workspace, Framework.VITE, {"OPENFORT_PUBLISHABLE_KEY": "pk_..."})
"""

from create_openfort.scaffolder.env_writer import (
    EnvLine,
    EnvLineKind,
    env_reference,
    fill_env,
    fill_env_exact,
    fill_env_text,
    fill_framework_env,
    lookup_key,
    parse_env,
    prefix_env,
)
from create_openfort.scaffolder.frameworks import FRAMEWORKS, Framework, FrameworkInfo
from create_openfort.scaffolder.materializer import (
    TemplateLayer,
    TemplateMaterializer,
    TemplateNotFoundError,
    add_to_package_json,
)
from create_openfort.scaffolder.merge import deep_merge

__all__ = [
    "Framework",
    "FrameworkInfo",
    "FRAMEWORKS",
    "TemplateLayer",
    "TemplateMaterializer",
    "TemplateNotFoundError",
    "add_to_package_json",
    "deep_merge",
    "EnvLine",
    "EnvLineKind",
    "env_reference",
    "fill_env",
    "fill_env_exact",
    "fill_env_text",
    "fill_framework_env",
    "lookup_key",
    "parse_env",
    "prefix_env",
]
