# File: modelts/exporters.py
"""
modelts - TypeScript Module Exporter
======================================

Responsible for:
    1. Collecting model classes from modules, declarative bases or lists.
    2. Transforming each one and assembling a single ``.ts`` module.
    3. Writing that module atomically (write-to-temp then rename).
    4. Reporting what was generated, skipped or failed.

Output layout::

    // This file is generated by modelts. Do not edit it by hand.

    export type Post = {
    id: number
    title: string
    author: User
    };

    export type User = {
    ...
    };

Rendering is deterministic: the same models in the same order always give
byte-identical output.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from modelts.introspection import is_model
from modelts.models import TransformedType
from modelts.transformer import ModelTransformer, TransformationError
from modelts.utils import Timer, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelts.exporters")


# ---------------------------------------------------------------------------
# Model collection
# ---------------------------------------------------------------------------


def _models_in_module(module: ModuleType) -> List[type]:
    return [
        obj
        for obj in vars(module).values()
        if inspect.isclass(obj)
        and obj.__module__ == module.__name__
        and is_model(obj)
    ]


def _registry_of(source: Any) -> Optional[Any]:
    if is_model(source):
        return None
    registry: Any = getattr(source, "registry", source)
    return registry if hasattr(registry, "mappers") else None


def _models_in_registry(registry: Any) -> List[type]:
    classes: List[type] = [mapper.class_ for mapper in registry.mappers]
    return sorted(classes, key=lambda cls: cls.__name__)


def collect_models(sources: Iterable[Any]) -> List[Any]:
    """
    Flatten *sources* into an ordered, de-duplicated list of candidates.

    Each source may be:
        - a module: the mapped classes defined in it, in definition order;
        - a declarative base or ``registry``: all its mapped classes, by name;
        - anything else: passed through as-is (non-models are reported as
          skipped by the exporter).
    """
    collected: List[Any] = []
    seen: Set[int] = set()

    for source in sources:
        if isinstance(source, ModuleType):
            candidates: List[Any] = _models_in_module(source)
        else:
            registry: Optional[Any] = _registry_of(source)
            if registry is not None:
                candidates = _models_in_registry(registry)
            else:
                candidates = [source]

        for candidate in candidates:
            key: int = id(candidate)
            if key in seen:
                continue
            seen.add(key)
            collected.append(candidate)

    logger.debug("Collected %d candidate(s).", len(collected))
    return collected


# ---------------------------------------------------------------------------
# Export report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class ExportReport:
    """
    Outcome of ``TypeScriptExporter.render()`` / ``export()``.

    ``success`` is False as soon as one error is recorded.
    """

    success: bool = False
    output_path: str = ""
    dry_run: bool = False

    # Metrics
    total_models: int = 0
    total_properties: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    elapsed_seconds: float = 0.0

    type_names: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append(f"{'='*60}")
        lines.append("  modelts - Export Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:      {status}")
        lines.append(f"  Output:      {self.output_path or '<stdout>'}")
        if self.dry_run:
            lines.append("  Mode:        dry run (nothing written)")
        lines.append(f"  Models:      {self.total_models}")
        lines.append(f"  Properties:  {self.total_properties}")
        lines.append(f"  Lines:       {self.total_lines:,}")
        lines.append(f"  Bytes:       {self.total_bytes:,}")
        lines.append(f"  Time:        {self.elapsed_seconds:.3f}s")

        for title, items, icon in (
            ("Errors", self.errors, "x"),
            ("Warnings", self.warnings, "!"),
            ("Skipped", self.skipped, "-"),
        ):
            if items:
                lines.append(f"{'-'*60}")
                lines.append(f"  {title} ({len(items)}):")
                for item in items:
                    lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class TypeScriptExporter:
    """
    Renders models into one TypeScript module and writes it.

    Usage::

        exporter = TypeScriptExporter(ModelTransformer(config))
        report = exporter.export(collect_models([app.models]), Path("models.ts"))
        print(report.summary())
    """

    def __init__(
        self,
        transformer: Optional[ModelTransformer] = None,
        *,
        skip_invalid_models: bool = False,
        atomic_writes: bool = True,
    ) -> None:
        """
        Args:
            transformer: Transformer to use; a default one when omitted.
            skip_invalid_models: If True, a model that fails to transform is
                                 left out with a warning instead of failing
                                 the export.
            atomic_writes: Use write-to-temp+rename.
        """
        self._transformer: ModelTransformer = transformer or ModelTransformer()
        self._skip_invalid_models: bool = skip_invalid_models
        self._atomic_writes: bool = atomic_writes

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def render(self, models: Iterable[Any]) -> Tuple[str, ExportReport]:
        """Transform *models* and assemble the module text."""
        report: ExportReport = ExportReport()

        with Timer("render") as timer:
            transformed: List[TransformedType] = self._transform_all(models, report)

        report.elapsed_seconds = timer.elapsed
        report.total_models = len(transformed)
        report.total_properties = sum(len(t.properties) for t in transformed)
        report.type_names = [t.name for t in transformed]
        report.success = not report.errors

        content: str = self._assemble(transformed)
        report.total_bytes = len(content.encode("utf-8"))
        report.total_lines = content.count("\n")
        return content, report

    def export(
        self,
        models: Iterable[Any],
        output_path: Path,
        *,
        dry_run: bool = False,
    ) -> ExportReport:
        """
        Render *models* and write them to *output_path*.

        Nothing is written when rendering failed or *dry_run* is set.

        Raises:
            OSError: If the file cannot be written.
        """
        content, report = self.render(models)
        report.output_path = str(output_path)
        report.dry_run = dry_run

        if not report.success:
            logger.error(
                "Export aborted with %d error(s); %s left untouched.",
                len(report.errors),
                output_path,
            )
            return report

        if dry_run:
            logger.info(
                "Dry run: would write %d bytes to %s.", report.total_bytes, output_path
            )
            return report

        write_file(output_path, content, atomic=self._atomic_writes)
        logger.info(
            "Exported %d type(s) to %s (%d bytes).",
            report.total_models,
            output_path,
            report.total_bytes,
        )
        return report

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _transform_all(
        self, models: Iterable[Any], report: ExportReport
    ) -> List[TransformedType]:
        results: List[TransformedType] = []
        names: Dict[str, str] = {}

        for model in models:
            label: str = getattr(model, "__qualname__", repr(model))
            try:
                transformed: Optional[TransformedType] = self._transformer.transform(
                    model
                )
            except TransformationError as exc:
                if self._skip_invalid_models:
                    logger.warning("Skipping %s: %s", label, exc)
                    report.warnings.append(str(exc))
                    report.skipped.append(label)
                    continue
                logger.error("Failed to transform %s: %s", label, exc)
                report.errors.append(str(exc))
                continue

            if transformed is None:
                report.skipped.append(label)
                continue

            owner: str = f"{getattr(model, '__module__', '?')}.{label}"
            if transformed.name in names:
                report.errors.append(
                    f"Type name '{transformed.name}' is produced by both "
                    f"{names[transformed.name]} and {owner}."
                )
                continue
            names[transformed.name] = owner
            results.append(transformed)

        return results

    def _assemble(self, transformed: List[TransformedType]) -> str:
        config = self._transformer.config
        blocks: List[str] = []
        if config.header:
            blocks.append(config.header)
        blocks.extend(t.declaration(config.type_keyword) for t in transformed)
        return "\n\n".join(blocks) + "\n"


__all__ = [
    "collect_models",
    "ExportReport",
    "TypeScriptExporter",
]
