"""Generator - runs the generation units over annotated sources and writes the generated modules."""
from __future__ import annotations

import ast
import keyword
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from plugingen.constants import (
    GENERATED_SUFFIX,
    RUNTIME_ALIAS,
    RUNTIME_MODULE,
    SKIP_DIRS,
    SOURCE_ALIAS,
)
from plugingen.declarations import Declaration, collect_declarations
from plugingen.descriptor import DescriptorUnit
from plugingen.diagnostics import (
    Diagnostic,
    GenerationError,
    module_name_diagnostic,
    syntax_diagnostic,
)
from plugingen.subscriptions import SubscriptionUnit
from plugingen.units import GenerationState, GenerationUnit, ImplBlock

logger = logging.getLogger(__name__)

HEADER = "# Generated by plugingen"


def default_units() -> List[GenerationUnit]:
    return [DescriptorUnit(), SubscriptionUnit()]


@dataclass
class DeclarationOutcome:
    """Result of running every applicable unit over one declaration."""

    declaration: Declaration
    states: Dict[str, GenerationState] = field(default_factory=dict)
    records: Dict[str, Any] = field(default_factory=dict)  # unit name -> validated record
    blocks: List[ImplBlock] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def state(self) -> GenerationState:
        if any(s == GenerationState.FAILED for s in self.states.values()):
            return GenerationState.FAILED
        if self.states and all(s == GenerationState.DONE for s in self.states.values()):
            return GenerationState.DONE
        return GenerationState.START

    @property
    def succeeded(self) -> bool:
        return self.state == GenerationState.DONE


@dataclass
class ModuleReport:
    """Everything generated from one source module."""

    path: Path
    module_name: str
    outcomes: List[DeclarationOutcome] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)  # file-level, e.g. invalid syntax
    output_path: Optional[Path] = None
    written: bool = False
    removed: Optional[Path] = None  # stale generated module deleted on this run

    @property
    def generated(self) -> List[DeclarationOutcome]:
        if self.errors:
            return []
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[DeclarationOutcome]:
        if self.errors:
            return list(self.outcomes)
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def diagnostics(self) -> List[Diagnostic]:
        result = list(self.errors)
        for outcome in self.outcomes:
            result.extend(outcome.diagnostics)
        return result

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def run_unit(unit: GenerationUnit, decl: Declaration, outcome: DeclarationOutcome) -> None:
    """Drive one unit through parse → validate → emit, recording its state."""
    outcome.states[unit.name] = GenerationState.PARSING
    try:
        parsed = unit.parse(decl)
        outcome.states[unit.name] = GenerationState.VALIDATING
        validated = unit.validate(decl, parsed)
    except GenerationError as e:
        outcome.states[unit.name] = GenerationState.FAILED
        outcome.diagnostics.append(e.diagnostic)
        logger.error(f"Failed to generate {unit.interface} for {decl.name}: {e}")
        return

    outcome.states[unit.name] = GenerationState.EMITTING
    outcome.records[unit.name] = validated
    outcome.blocks.append(unit.emit(decl, validated))
    outcome.states[unit.name] = GenerationState.DONE


def render_module(report: ModuleReport, runtime_module: str = RUNTIME_MODULE) -> str:
    """Render the generated module for the successful declarations of a report.

    Each declaration becomes a subclass of the source class that also
    implements the generated interfaces, under the same name. Runtime names
    are always reached through the module alias, so a source class called
    ``PluginInfo`` or ``EventType`` cannot shadow them.
    """
    outcomes = report.generated

    lines = [
        f"{HEADER} from {report.path.as_posix()}. Do not edit.",
        "from __future__ import annotations",
        "",
        f"import {runtime_module} as {RUNTIME_ALIAS}",
        f"import {report.module_name} as {SOURCE_ALIAS}",
    ]
    for outcome in outcomes:
        bases = [f"{SOURCE_ALIAS}.{outcome.name}"]
        bases.extend(f"{RUNTIME_ALIAS}.{block.interface}" for block in outcome.blocks)
        lines.extend(["", "", f"class {outcome.name}({', '.join(bases)}):"])
        for i, block in enumerate(outcome.blocks):
            if i:
                lines.append("")
            lines.extend(block.lines)

    exported = ", ".join(f'"{o.name}"' for o in outcomes)
    lines.extend(["", "", f"__all__ = [{exported}]", ""])
    return "\n".join(lines)


def is_generated(path: Path) -> bool:
    """Whether a file was written by this generator."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.readline().startswith(HEADER)
    except (OSError, UnicodeDecodeError):
        return False


def is_importable(module_name: str) -> bool:
    """Whether ``import <module_name>`` is valid Python."""
    parts = module_name.split(".")
    return all(
        part.isidentifier() and not keyword.iskeyword(part) and part != "__init__"
        for part in parts
    )


class Generator:
    """Generates ``Plugin`` / ``PluginSubscriptions`` implementations for annotated sources."""

    def __init__(
        self,
        runtime_module: str = RUNTIME_MODULE,
        suffix: str = GENERATED_SUFFIX,
        source_root: Optional[Path] = None,
        out_dir: Optional[Path] = None,
        units: Optional[Sequence[GenerationUnit]] = None,
    ):
        """Initialize the generator.

        Args:
            runtime_module: Module the generated code imports the interfaces from
            suffix: Appended to a source stem to name its generated module
            source_root: Root that module names are computed against;
                         defaults to each source file's own directory
            out_dir: Where generated modules are written; defaults to beside the source
            units: Generation units to run; defaults to descriptor and subscriptions
        """
        self.runtime_module = runtime_module
        self.suffix = suffix
        self.source_root = source_root
        self.out_dir = out_dir
        self.units = list(units) if units is not None else default_units()

    def run_declaration(self, decl: Declaration) -> DeclarationOutcome:
        """Run every applicable unit over a declaration.

        All units run even after one fails, so every problem is reported;
        the declaration is only emitted if all of them succeed.
        """
        outcome = DeclarationOutcome(declaration=decl)
        for unit in self.units:
            if unit.applies_to(decl):
                run_unit(unit, decl, outcome)
        return outcome

    def generate_source(self, source: str, path: Path, module_name: str) -> ModuleReport:
        """Generate from source text.

        Args:
            source: Python source text
            path: Path the source was read from, for diagnostics
            module_name: Importable name of the source module

        Returns:
            ModuleReport with one outcome per annotated declaration
        """
        report = ModuleReport(path=path, module_name=module_name)
        try:
            tree = ast.parse(source, filename=str(path))
        except SyntaxError as e:
            diagnostic = syntax_diagnostic(e, path)
            report.errors.append(diagnostic)
            logger.error(f"Cannot parse {path}: {diagnostic.format()}")
            return report

        for decl in collect_declarations(tree, path):
            report.outcomes.append(self.run_declaration(decl))

        logger.debug(
            f"{path}: {len(report.generated)} declaration(s) generated, {len(report.failed)} failed"
        )
        return report

    def render(self, report: ModuleReport) -> str:
        return render_module(report, self.runtime_module)

    def module_name_for(self, path: Path) -> str:
        """Importable module name of a source file."""
        path = path.resolve()
        if self.source_root is None:
            return path.stem

        root = Path(self.source_root).resolve()
        try:
            relative = path.relative_to(root)
        except ValueError:
            logger.warning(f"{path} is outside source root {root}, using '{path.stem}'")
            return path.stem

        parts = list(relative.with_suffix("").parts)
        if parts and parts[-1] == "__init__":
            parts.pop()
        return ".".join(parts) or path.stem

    def output_path_for(self, path: Path, root: Optional[Path] = None) -> Path:
        """Where the generated module for a source file goes.

        Under ``out_dir`` the source's directory layout relative to
        ``source_root`` (or the scanned ``root``) is mirrored, so files with
        the same stem in different directories do not overwrite each other.
        """
        filename = f"{path.stem}{self.suffix}.py"
        if self.out_dir is None:
            return path.parent / filename

        out_dir = Path(self.out_dir)
        base = self.source_root if self.source_root is not None else root
        if base is None:
            return out_dir / filename
        try:
            relative = path.resolve().parent.relative_to(Path(base).resolve())
        except ValueError:
            logger.warning(f"{path} is outside {base}, writing to {out_dir} directly")
            return out_dir / filename
        return out_dir / relative / filename

    def remove_stale(self, path: Path, report: ModuleReport) -> None:
        """Delete a previously generated module that no longer has any content."""
        if not path.exists():
            return
        if not is_generated(path):
            logger.warning(f"Not removing {path}: it was not written by plugingen")
            return
        path.unlink()
        report.removed = path
        logger.info(f"Removed stale {path}, no declaration in {report.path} generated")

    def iter_sources(self, path: Path) -> List[Path]:
        """Source files under a path, sorted, skipping generated modules."""
        if path.is_file():
            return [path]

        sources = []
        for item in sorted(path.rglob("*.py")):
            relative = item.relative_to(path)
            if any(part in SKIP_DIRS or part.startswith(".") for part in relative.parts[:-1]):
                continue
            if is_generated(item):
                continue
            sources.append(item)
        return sources

    def generate_file(
        self, path: Path, dry_run: bool = False, root: Optional[Path] = None
    ) -> ModuleReport:
        """Generate from one source file and write the result.

        The generated module is written only if at least one declaration
        succeeded. Otherwise a module left over from an earlier run is
        removed, so the host never loads stale implementations.
        """
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()

        module_name = self.module_name_for(path)
        report = self.generate_source(source, path, module_name)
        if report.outcomes and not is_importable(module_name):
            diagnostic = module_name_diagnostic(module_name, path)
            report.errors.append(diagnostic)
            logger.error(f"Cannot generate for {path}: {diagnostic.format()}")

        output_path = self.output_path_for(path, root)
        if not report.generated:
            if not dry_run:
                self.remove_stale(output_path, report)
            return report

        report.output_path = output_path
        if dry_run:
            logger.debug(f"Dry run, not writing {report.output_path}")
            return report

        report.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report.output_path, "w", encoding="utf-8") as f:
            f.write(self.render(report))
        report.written = True
        logger.info(f"Wrote {report.output_path} ({len(report.generated)} declaration(s))")
        return report

    def generate_path(self, path: Path, dry_run: bool = False) -> List[ModuleReport]:
        """Generate for a file or every source file under a directory."""
        if not path.exists():
            raise FileNotFoundError(f"Source path does not exist: {path}")

        root = path.parent if path.is_file() else path
        reports = []
        for source in self.iter_sources(path):
            report = self.generate_file(source, dry_run=dry_run, root=root)
            if report.outcomes or report.errors:
                reports.append(report)

        logger.info(f"Processed {len(reports)} annotated module(s) under {path}")
        return reports
