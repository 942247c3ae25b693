"""EditorSession — one open project: graph, viewport and interaction wired to storage.

Usage::

    repo = open_repository(EditorConfig())
    project = repo.create_project("Main office")
    session = EditorSession.open(repo, project.id)
    await session.upload_image(png_bytes)
    session.machine.set_mode("add_node")
    session.machine.canvas_click(PointerEvent(500, 250))
    print(session.export_json())

The FloorPlan and transform are read synchronously when the session opens;
the background image is fetched separately with :meth:`EditorSession.load_image`
so editing never waits on it.  Every graph or viewport mutation is written
through to the repository right after it is applied in memory.
"""

from __future__ import annotations

import logging
from typing import Any

from floormap.config import DEFAULT_PROJECT_NAME
from floormap.graph.model import FloorGraph, MutationResult
from floormap.imaging import decode_data_url, image_size
from floormap.interaction.machine import InteractionStateMachine, StatusReadout
from floormap.models.floorplan import (
    CoordinateSpaceMismatchError,
    FloorPlan,
    UnitMode,
    ViewportTransform,
    parse_unit_mode,
)
from floormap.settings import EditorConfig
from floormap.storage.blobs import BlobStore
from floormap.storage.repository import ProjectRepository
from floormap.storage.structured import StructuredStore
from floormap.viewport import ViewportEngine

logger = logging.getLogger(__name__)


def open_repository(config: EditorConfig | None = None) -> ProjectRepository:
    """Build a repository on the databases named in *config*."""
    config = config or EditorConfig()
    return ProjectRepository(
        StructuredStore(config.db_path),
        BlobStore(config.blob_db_path),
    )


class EditorSession:
    """The editor state of one project.

    Parameters
    ----------
    repository:
        Storage for this project's data.
    project_id:
        Project being edited.
    floor_plan:
        Loaded (or default) FloorPlan.
    transform:
        Loaded (or default) viewport transform.
    config:
        Distance policy, zoom sensitivity and default unit mode.
    project_name:
        Display name from the project index.
    """

    def __init__(
        self,
        repository: ProjectRepository,
        project_id: str,
        floor_plan: FloorPlan,
        transform: ViewportTransform,
        *,
        config: EditorConfig | None = None,
        project_name: str = DEFAULT_PROJECT_NAME,
    ) -> None:
        self.repository = repository
        self.project_id = project_id
        self.config = config or EditorConfig()
        self.project_name = project_name
        self.image: bytes | None = None

        self.graph = FloorGraph(
            floor_plan,
            distance_policy=self.config.make_distance_policy(),
            on_change=self._persist_floor_plan,
        )
        self.viewport = ViewportEngine(
            transform,
            sensitivity=self.config.zoom_sensitivity,
            on_change=self._persist_transform,
        )
        self.machine = InteractionStateMachine(self.viewport, self.graph)

    @classmethod
    def open(
        cls,
        repository: ProjectRepository,
        project_id: str,
        config: EditorConfig | None = None,
    ) -> EditorSession:
        """Load a project's FloorPlan and transform and reconcile the index."""
        config = config or EditorConfig()
        project = repository.get_project(project_id)
        plan = repository.load_floor_plan(project_id, config.unit_mode)
        transform = repository.load_transform(project_id)

        session = cls(
            repository,
            project_id,
            plan,
            transform,
            config=config,
            project_name=project.name if project is not None else DEFAULT_PROJECT_NAME,
        )
        session.graph.repair()
        repository.reconcile(project_id, session.graph.floor_plan)
        logger.info(
            "Opened project %s with %d nodes", project_id, len(session.graph)
        )
        return session

    # -- Write-through ---------------------------------------------------------

    def _persist_floor_plan(self, plan: FloorPlan) -> None:
        self.repository.save_floor_plan(plan)

    def _persist_transform(self, transform: ViewportTransform) -> None:
        self.repository.save_transform(self.project_id, transform)

    # -- Image -----------------------------------------------------------------

    @property
    def image_size(self) -> tuple[float, float] | None:
        return self.machine.image_size

    def set_image_size(self, width: float, height: float) -> None:
        """Set the rendered image size used for unprojection."""
        self.machine.image_size = (width, height)

    def _set_image(
        self,
        data: bytes,
        width: float | None = None,
        height: float | None = None,
    ) -> None:
        self.image = data
        if width is not None and height is not None:
            self.machine.image_size = (width, height)
        else:
            self.machine.image_size = image_size(data)

    async def load_image(self) -> bool:
        """Fetch the stored background image.  Returns True if one was found.

        A missing or unreadable image leaves the editor usable without one.
        """
        data = await self.repository.load_image(self.project_id)
        if not data:
            return False
        self._set_image(data)
        return True

    async def upload_image(
        self,
        data: bytes | str,
        width: float | None = None,
        height: float | None = None,
    ) -> bool:
        """Replace the background image and reset the view.

        *data* may be raw image bytes or a ``data:`` URL.  Returns True if
        the image was persisted.
        """
        payload = decode_data_url(data)
        self._set_image(payload, width, height)
        self.viewport.reset()
        return await self.repository.save_image(self.project_id, payload)

    # -- Unit mode -------------------------------------------------------------

    @property
    def unit_mode(self) -> UnitMode:
        return self.graph.unit_mode

    def set_unit_mode(self, mode: UnitMode | str, *, convert: bool = False) -> MutationResult:
        """Switch the coordinate unit mode of the floor plan.

        Stored coordinates are never silently reinterpreted: switching to a
        different mode requires ``convert=True`` and a known image size.
        """
        mode = parse_unit_mode(mode)
        if mode is self.graph.unit_mode:
            return MutationResult.NOOP
        if not convert:
            raise CoordinateSpaceMismatchError(
                f"Floor plan coordinates are stored as {self.graph.unit_mode.value}; "
                f"pass convert=True to convert them to {mode.value}"
            )
        if self.image_size is None:
            raise ValueError("An image must be loaded to convert coordinates")
        return self.graph.convert_units(mode, *self.image_size)

    # -- Project-level actions -------------------------------------------------

    async def clear_project_data(self) -> None:
        """Erase this project's FloorPlan, transform and image.  Irreversible."""
        await self.repository.clear_project_data(self.project_id)
        self.image = None
        self.machine.clear()
        self.machine.image_size = None
        self.graph.reset(FloorPlan.default(self.project_id, self.config.unit_mode))
        self.viewport.reset()

    def export(self) -> dict[str, Any]:
        return self.graph.floor_plan.to_export()

    def export_json(self, indent: int = 2) -> str:
        return self.graph.floor_plan.to_json(indent=indent)

    def status(self) -> StatusReadout:
        return self.machine.status()
