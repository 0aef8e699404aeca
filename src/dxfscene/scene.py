from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Protocol

from .convert import ConversionContext, convert
from .document import Document
from .primitives import Point3D, Primitive, bounding_box

logger = logging.getLogger(__name__)


class Backend(Protocol):
    def add(self, primitive: Primitive) -> Any:
        ...


@dataclass
class Scene:
    primitives: list[Primitive] = field(default_factory=list)
    total_entities: int = 0
    converted_entities: int = 0
    skipped_by_type: dict[str, int] = field(default_factory=dict)

    @property
    def skipped_entities(self) -> int:
        return self.total_entities - self.converted_entities

    def counts_by_kind(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for primitive in self.primitives:
            counts[primitive.kind] = counts.get(primitive.kind, 0) + 1
        return dict(sorted(counts.items()))

    def extents(self) -> tuple[Point3D, Point3D] | None:
        return bounding_box(self.primitives)


def iter_primitives(
    document: Document | Mapping[str, Any],
    *,
    types: str | Iterable[str] | None = None,
    context: ConversionContext | None = None,
    **context_options: Any,
) -> Iterator[tuple[str, list[Primitive]]]:
    """Yield ``(dxftype, primitives)`` per entity in document order.

    Stopping the iteration early leaves already yielded primitives usable.
    """
    doc = _as_document(document)
    ctx = context if context is not None else ConversionContext.from_document(doc, **context_options)
    for entity in doc.query(types):
        yield entity.dxftype, convert(entity, ctx)


def assemble(
    document: Document | Mapping[str, Any],
    backend: Backend | None = None,
    *,
    types: str | Iterable[str] | None = None,
    strict: bool = False,
    context: ConversionContext | None = None,
    **context_options: Any,
) -> Scene:
    """Convert every entity of ``document`` and collect the primitives.

    When ``backend`` is given, each primitive is also passed to
    ``backend.add`` in generation order. With ``strict=True`` a ``ValueError``
    summarizing the skipped entity types is raised after conversion.
    """
    scene = Scene()
    for dxftype, primitives in iter_primitives(
        document, types=types, context=context, **context_options
    ):
        scene.total_entities += 1
        if not primitives:
            scene.skipped_by_type[dxftype] = scene.skipped_by_type.get(dxftype, 0) + 1
            continue
        scene.converted_entities += 1
        scene.primitives.extend(primitives)
        if backend is not None:
            for primitive in primitives:
                backend.add(primitive)

    scene.skipped_by_type = dict(sorted(scene.skipped_by_type.items()))
    logger.debug(
        "assembled %d primitives from %d entities (%d skipped)",
        len(scene.primitives),
        scene.total_entities,
        scene.skipped_entities,
    )
    if strict and scene.skipped_entities > 0:
        summary = ", ".join(
            f"{dxftype}:{count}" for dxftype, count in scene.skipped_by_type.items()
        )
        raise ValueError(f"failed to convert {scene.skipped_entities} entities ({summary})")
    return scene


def _as_document(document: Document | Mapping[str, Any]) -> Document:
    if isinstance(document, Document):
        return document
    return Document.from_dict(document)
