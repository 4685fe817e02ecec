"""Layered template materialization.

A framework's files are assembled from up to four directories under a
templates root, copied in this order so later layers override earlier ones:

1. ``raw-templates/template-<fw>``              - framework baseline
2. ``updated-files/common/template-<fw>``       - cross-product overrides
3. ``updated-files/<product>/template-<fw>``    - product overrides
4. ``updated-files/<product>/common``           - product-wide overrides

``package.json`` never takes part in the copy; the fragments of layers 1, 3
and 4 are deep-merged and written once with the workspace's package name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from create_openfort.config import DEFAULT_PACKAGE_NAME
from create_openfort.scaffolder.frameworks import Framework
from create_openfort.scaffolder.merge import deep_merge
from create_openfort.utils import dump_package_json, load_json_or_empty, print_info, print_warning
from create_openfort.workspace.file_ops import copy

if TYPE_CHECKING:
    from create_openfort.workspace.manager import ProjectWorkspace

PACKAGE_JSON = "package.json"
RENAME_PREFIX = "_"


class TemplateNotFoundError(Exception):
    """Raised when the raw template for a framework does not exist."""

    def __init__(self, framework: Framework, path: Path) -> None:
        self.framework = framework
        self.path = path
        super().__init__(f"Template '{framework.value}' not found at {path}")


@dataclass(frozen=True)
class TemplateLayer:
    """One directory of files copied during materialization.

    Attributes:
        source_dir: Directory whose contents are copied.
        ignore: Paths relative to ``source_dir`` that are skipped.
        rename_prefix: Top-level entries starting with this prefix are
            written without it (``_.gitignore`` -> ``.gitignore``).
    """

    source_dir: Path
    ignore: tuple[str, ...] = ()
    rename_prefix: str = RENAME_PREFIX

    @property
    def exists(self) -> bool:
        return self.source_dir.is_dir()

    def target_name(self, name: str) -> str:
        if self.rename_prefix and name.startswith(self.rename_prefix) and len(name) > len(self.rename_prefix):
            return name[len(self.rename_prefix):]
        return name

    def ignored_paths(self) -> list[Path]:
        return [self.source_dir / rel for rel in self.ignore]


@dataclass
class TemplateMaterializer:
    """Copies a framework template into a workspace.

    Attributes:
        templates_root: Directory holding ``raw-templates/`` and
            ``updated-files/``.
        product: Folder name under ``updated-files/`` for product overrides.
        verbose: Report every layer as it is copied.
    """

    templates_root: Path
    product: str = "openfortkit"
    verbose: bool = False
    copied_layers: list[Path] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        self.templates_root = Path(self.templates_root)

    # -- Layer locations ---------------------------------------------------

    def raw_dir(self, framework: Framework) -> Path:
        return self.templates_root / "raw-templates" / framework.template_dir_name

    def common_dir(self, framework: Framework) -> Path:
        return self.templates_root / "updated-files" / "common" / framework.template_dir_name

    def specific_dir(self, framework: Framework) -> Path:
        return self.templates_root / "updated-files" / self.product / framework.template_dir_name

    def specific_common_dir(self) -> Path:
        return self.templates_root / "updated-files" / self.product / "common"

    def layers(self, framework: Framework) -> list[TemplateLayer]:
        """The four layers for *framework*, in precedence order."""
        return [
            TemplateLayer(
                self.raw_dir(framework),
                ignore=(PACKAGE_JSON, *framework.info.raw_exceptions),
            ),
            TemplateLayer(self.common_dir(framework), ignore=(PACKAGE_JSON,)),
            TemplateLayer(self.specific_dir(framework), ignore=(PACKAGE_JSON,)),
            TemplateLayer(self.specific_common_dir(), ignore=(PACKAGE_JSON,)),
        ]

    # -- Public API --------------------------------------------------------

    def materialize(self, framework: Framework, workspace: ProjectWorkspace) -> Path:
        """Copy every layer of *framework* into *workspace* and merge package.json.

        Returns:
            Directory the template was written to (the workspace root, or its
            ``frontend`` folder in subfolder mode).

        Raises:
            TemplateNotFoundError: If the raw template directory is missing.
            WorkspaceNotInitializedError: If the workspace has no root yet.
        """
        raw_dir = self.raw_dir(framework)
        if not raw_dir.is_dir():
            raise TemplateNotFoundError(framework, raw_dir)

        destination = workspace.resolve_path("")
        if workspace.uses_subfolders:
            if self.verbose:
                print_info(f"Creating frontend folder {destination}")
            destination.mkdir(parents=True, exist_ok=True)

        self.copied_layers = []
        for layer in self.layers(framework):
            self.copy_layer(layer, workspace)

        self.merge_package_json(framework, workspace)
        return destination

    def copy_layer(self, layer: TemplateLayer, workspace: ProjectWorkspace) -> bool:
        """Copy one layer into the workspace.  Missing layers are skipped."""
        if not layer.exists:
            if self.verbose:
                print_warning(f"Template layer {layer.source_dir} not found, skipping")
            return False

        if self.verbose:
            print_info(f"Copying {layer.source_dir}")

        ignored = layer.ignored_paths()
        for entry in sorted(layer.source_dir.iterdir()):
            target = workspace.resolve_path(layer.target_name(entry.name))
            copy(entry, target, ignored)
        self.copied_layers.append(layer.source_dir)
        return True

    def merged_package_json(self, framework: Framework) -> dict[str, Any]:
        """Deep-merge the package.json fragments of the raw and product layers."""
        raw = load_json_or_empty(self.raw_dir(framework) / PACKAGE_JSON)
        specific = load_json_or_empty(self.specific_dir(framework) / PACKAGE_JSON)
        specific_common = load_json_or_empty(self.specific_common_dir() / PACKAGE_JSON)
        return dict(deep_merge(raw, deep_merge(specific, specific_common)))

    def merge_package_json(self, framework: Framework, workspace: ProjectWorkspace) -> Path:
        """Write the merged package.json named after the workspace package."""
        if self.verbose:
            print_info(f"Merging {PACKAGE_JSON}")
        pkg = self.merged_package_json(framework)
        pkg["name"] = workspace.package_name or DEFAULT_PACKAGE_NAME
        workspace.write(PACKAGE_JSON, dump_package_json(pkg))
        return workspace.resolve_path(PACKAGE_JSON)


def add_to_package_json(
    workspace: ProjectWorkspace,
    dependencies: Mapping[str, str] | None = None,
    dev_dependencies: Mapping[str, str] | None = None,
    scripts: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Shallow-merge extra dependencies and scripts into the written package.json.

    Raises:
        FileNotFoundError: If the workspace has no package.json yet.
    """
    pkg = load_json_or_empty(workspace.resolve_path(PACKAGE_JSON))
    if not pkg:
        raise FileNotFoundError(f"{PACKAGE_JSON} not found in {workspace.resolve_path('')}")

    for section, extra in (
        ("dependencies", dependencies),
        ("devDependencies", dev_dependencies),
        ("scripts", scripts),
    ):
        pkg[section] = {**pkg.get(section, {}), **(extra or {})}

    workspace.write(PACKAGE_JSON, dump_package_json(pkg))
    return pkg

